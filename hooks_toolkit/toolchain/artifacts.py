from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ArtifactPaths:
    """
    Where each stage reads and writes, relative to a hook project.

    The compiler decides the raw artifact location
    (`<workdir>/target/<triple>/release/<name>.<ext>`); everything else is
    placed next to it, and the text dumps go to `<workdir>/target`.
    """

    workdir: Path
    name: str
    triple: str = "wasm32-unknown-unknown"
    ext: str = "wasm"

    @property
    def release_dir(self) -> Path:
        return self.workdir / "target" / self.triple / "release"

    @property
    def debug_dir(self) -> Path:
        return self.workdir / "target"

    @property
    def raw(self) -> Path:
        return self.release_dir / f"{self.name}.{self.ext}"

    @property
    def flattened(self) -> Path:
        return self.release_dir / f"{self.name}-flattened.{self.ext}"

    @property
    def cleaned(self) -> Path:
        return self.release_dir / f"{self.name}-cleaned.{self.ext}"

    @property
    def raw_text(self) -> Path:
        return self.debug_dir / f"{self.name}.wat"

    @property
    def flattened_text(self) -> Path:
        return self.debug_dir / f"{self.name}-flattened.wat"

    @property
    def cleaned_text(self) -> Path:
        return self.debug_dir / f"{self.name}-cleaned.wat"

    def text_conversions(self):
        """(binary, text) pairs for the debug dump stage."""
        return (
            (self.raw, self.raw_text),
            (self.flattened, self.flattened_text),
            (self.cleaned, self.cleaned_text),
        )


__all__ = ["ArtifactPaths"]
