"""
Data structures describing the contents of a dependency manifest.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Dependency:
    """A single downloadable file declared in a manifest."""

    url: str
    file_name: str
    source: str
    line_number: int = 0


@dataclass
class ManifestParseResult:
    """The outcome of parsing one manifest: usable URLs and rejected lines."""

    source: str
    dependencies: list[Dependency] = field(default_factory=list)
    ignored: list[tuple[int, str]] = field(default_factory=list)

    @property
    def urls(self) -> list[str]:
        return [dep.url for dep in self.dependencies]
