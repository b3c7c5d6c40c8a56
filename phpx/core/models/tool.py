"""
Resolution results — the single tagged union threaded from the
resolver through the cache to the executor.

    PharArtifact      a single .phar file, run as ``php tool.phar``
    ComposerArtifact  a Composer package installed into an isolated dir,
                      run as ``php vendor/bin/<bin>``
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ToolInfo(BaseModel):
    """A downloadable single-file artifact."""

    name: str
    version: str
    download_url: str
    signature_url: str | None = None  # .asc/.sig signature or .sha256/.sha512 checksum
    hash: str | None = None           # "algo:hex" expected digest


class ComposerPackage(BaseModel):
    """A Composer package that must be installed to run."""

    package: str
    version: str
    bin_names: list[str] = Field(default_factory=list)

    @property
    def slug(self) -> str:
        """Directory-safe form of the package name (``vendor-name``)."""
        return self.package.replace("/", "-")

    @property
    def bin_name(self) -> str:
        """First declared binary, else the package's final path segment."""
        if self.bin_names:
            return self.bin_names[0]
        return self.package.rsplit("/", 1)[-1] or "tool"


class PharArtifact(BaseModel):
    kind: Literal["phar"] = "phar"
    info: ToolInfo

    @property
    def version(self) -> str:
        return self.info.version


class ComposerArtifact(BaseModel):
    kind: Literal["composer"] = "composer"
    package: ComposerPackage

    @property
    def version(self) -> str:
        return self.package.version


ResolvedTool = Annotated[
    Union[PharArtifact, ComposerArtifact],
    Field(discriminator="kind"),
]
