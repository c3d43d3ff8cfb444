"""``.gitignore`` generation.

The file is a list of named sections (general, STS, IntelliJ IDEA, NetBeans,
VS Code).  Build systems add their own output directories to the defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .contributors import GenerationContext


@dataclass
class GitIgnoreSection:
    name: str | None
    items: list[str] = field(default_factory=list)

    def add(self, *items: str) -> "GitIgnoreSection":
        for item in items:
            if item not in self.items:
                self.items.append(item)
        return self

    def lines(self) -> list[str]:
        if not self.items:
            return []
        header = ["", f"### {self.name} ###"] if self.name else []
        return header + self.items


class GitIgnore:
    """Ordered ``.gitignore`` sections."""

    def __init__(self) -> None:
        self.general = GitIgnoreSection(None)
        self.sts = GitIgnoreSection("STS")
        self.intellij_idea = GitIgnoreSection("IntelliJ IDEA")
        self.netbeans = GitIgnoreSection("NetBeans")
        self.vscode = GitIgnoreSection("VS Code")
        self.sections: list[GitIgnoreSection] = [
            self.general,
            self.sts,
            self.intellij_idea,
            self.netbeans,
            self.vscode,
        ]

    def section(self, name: str) -> GitIgnoreSection | None:
        if name.lower() == "general":
            return self.general
        for section in self.sections:
            if section.name is not None and section.name.lower() == name.lower():
                return section
        return None

    def add_section(self, name: str) -> GitIgnoreSection:
        """Return section *name*, appending it if absent."""
        section = self.section(name)
        if section is None:
            section = GitIgnoreSection(name)
            self.sections.append(section)
        return section

    def is_empty(self) -> bool:
        return all(not section.items for section in self.sections)

    def render(self) -> str:
        lines = [line for section in self.sections for line in section.lines()]
        # The first written section may be a named one; drop its leading blank line.
        if lines and lines[0] == "":
            lines = lines[1:]
        return "\n".join(lines) + "\n" if lines else ""


def default_gitignore(build_system: str) -> GitIgnore:
    """IDE defaults plus the output directories of *build_system*."""
    gitignore = GitIgnore()
    gitignore.sts.add(
        ".apt_generated",
        ".classpath",
        ".factorypath",
        ".project",
        ".settings",
        ".springBeans",
        ".sts4-cache",
    )
    gitignore.intellij_idea.add(".idea", "*.iws", "*.iml", "*.ipr")
    gitignore.netbeans.add("/nbproject/private/", "/nbbuild/", "/dist/", "/nbdist/", "/.nb-gradle/")
    gitignore.vscode.add(".vscode/")

    if build_system == "maven":
        gitignore.general.add("/target/", "!.mvn/wrapper/maven-wrapper.jar")
        gitignore.netbeans.add("/build/")
    elif build_system.startswith("gradle"):
        gitignore.general.add(".gradle", "/build/", "!gradle/wrapper/gradle-wrapper.jar")
        gitignore.intellij_idea.add("/out/")
    return gitignore


class GitIgnoreContributor:
    """Writes ``.gitignore`` at the project root."""

    order = 0

    def __init__(self, gitignore: GitIgnore | None = None) -> None:
        self.gitignore = gitignore

    async def contribute(self, context: GenerationContext) -> None:
        gitignore = self.gitignore or default_gitignore(context.description.build_system)
        if gitignore.is_empty():
            return
        await context.write_file(".gitignore", gitignore.render())
