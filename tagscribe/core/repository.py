"""Remote repository identifiers parsed from SSH or HTTPS clone URLs."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from tagscribe.core.errors import FormatError

# Not completely accurate, but good enough for hosting domains. ASCII only.
_HOST = r"[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,6}"
_PART = r"[A-Za-z0-9_.-]+"

# Tried in order; the first full match wins.
_URL_FORMATS: tuple[re.Pattern[str], ...] = (
    # SSH: git@github.com:owner/name.git
    re.compile(rf"git@(?P<host>{_HOST}):(?P<owner>{_PART})/(?P<name>{_PART})\.git"),
    # HTTPS: https://github.com/owner/name.git
    re.compile(rf"https://(?P<host>{_HOST})/(?P<owner>{_PART})/(?P<name>{_PART})\.git"),
)


class RepositoryIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    owner: str
    name: str

    @property
    def url(self) -> str:
        """Canonical HTTPS URL, without the ``.git`` suffix."""
        return f"https://{self.host}/{self.owner}/{self.name}"

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, url: str) -> RepositoryIdentifier:
        """Parse a clone URL; anything but the two exact dialects is a FormatError."""
        for pattern in _URL_FORMATS:
            match = pattern.fullmatch(url)
            if match is not None:
                return cls(host=match["host"], owner=match["owner"], name=match["name"])
        raise FormatError("Invalid repository URL", url)
