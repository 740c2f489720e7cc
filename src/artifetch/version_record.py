"""
Flat ``name=value`` record of the remote version identifiers observed for
each artifact.
"""

import logging
import pathlib
from typing import Dict, Iterator, Optional

from artifetch.artifetch_logger import ArtifetchLogger


class VersionRecord:
    """
    Mapping from artifact name to the last known remote version identifier.

    A record is either loaded read-only from a cache directory or accumulated
    during a run and written once to the output directory. Neither names nor
    values may contain ``=`` or a line break.
    """

    def __init__(self, versions: Optional[Dict[str, str]] = None):
        self._versions: Dict[str, str] = {}
        for name, value in (versions or {}).items():
            self.set(name, value)

    @staticmethod
    def _check_field(kind: str, text: str) -> None:
        if not text:
            raise ValueError(f"Version record {kind} must not be empty")
        if "=" in text or "\n" in text or "\r" in text:
            raise ValueError(f"Version record {kind} must not contain '=' or a line break: {text!r}")

    def set(self, name: str, version: str) -> None:
        self._check_field("name", name)
        self._check_field("value", version)
        self._versions[name] = version

    def get(self, name: str) -> Optional[str]:
        return self._versions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._versions

    def __iter__(self) -> Iterator[str]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionRecord):
            return NotImplemented
        return self._versions == other._versions

    def __repr__(self) -> str:
        return f"VersionRecord({self._versions!r})"

    def to_dict(self) -> Dict[str, str]:
        return dict(self._versions)

    @classmethod
    def parse(cls, text: str, logger: Optional[ArtifetchLogger] = None) -> "VersionRecord":
        """
        Parse the contents of a version record file.

        Blank lines are ignored. Lines without a ``=`` separator or with an
        empty name or value are skipped with a warning.
        """
        record = cls()
        for line_number, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            name, sep, value = line.partition("=")
            name = name.strip()
            value = value.strip()
            if not sep or not name or not value or "=" in value:
                if logger is not None:
                    logger.log(
                        f"Skipping malformed version record line {line_number}: {line}",
                        logging.WARNING,
                    )
                continue
            record.set(name, value)
        return record

    @classmethod
    def load(cls, path: Optional[pathlib.Path], logger: Optional[ArtifetchLogger] = None) -> "VersionRecord":
        """
        Load a version record, returning an empty record when there is no
        file at path or the file cannot be read.
        """
        if path is None or not path.is_file():
            return cls()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            if logger is not None:
                logger.log(f"Ignoring unreadable version record {path}: {str(e)}", logging.WARNING)
            return cls()
        return cls.parse(text, logger)

    def dumps(self) -> str:
        return "".join(f"{name}={value}\n" for name, value in self._versions.items())

    def write(self, path: pathlib.Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(), encoding="utf-8")
