"""Reading the organisation and access token from a ``.env`` file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class Config:
    """Settings needed to talk to the organisation's API."""

    organization: str
    token: str


def parse_dot_env(text: str) -> Optional[Config]:
    """Parse ``key=value`` lines; return ``None`` if a required key is missing."""
    props: dict[str, str] = {}
    for line in text.split("\n"):
        key, sep, value = line.partition("=")
        if sep:
            props[key.strip()] = value.strip()
    try:
        return Config(organization=props["organization"], token=props["token"])
    except KeyError:
        return None


def read_dot_env(path: Union[str, Path] = ".env") -> Optional[Config]:
    """Read and parse the ``.env`` file at ``path``."""
    return parse_dot_env(Path(path).read_text())