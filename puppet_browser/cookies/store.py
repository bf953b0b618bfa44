"""File-backed cookie store used by save_session/load_session."""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ..errors import DeserializeError, PersistError, SessionNotFoundError
from .models import Cookie

logger = logging.getLogger(__name__)

_cookie_list = TypeAdapter(list[Cookie])


def dumps(cookies: list[Cookie]) -> str:
    """Serialize cookies to the stable on-disk JSON form.

    Cookies are ordered by (domain, path, name) and keys are sorted, so the
    same jar always produces the same bytes.
    """
    ordered = sorted(cookies, key=lambda c: c.key)
    return json.dumps(
        [c.to_dict() for c in ordered],
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
    ) + "\n"


def loads(text: str) -> list[Cookie]:
    """Parse session file content.

    Accepts a JSON array of cookies, or an object with a ``cookies`` key
    (Playwright storage-state files and older dumps).
    """
    data = json.loads(text)
    if isinstance(data, dict):
        if "cookies" not in data:
            raise ValueError("session object has no 'cookies' key")
        data = data["cookies"]
    return _cookie_list.validate_python(data)


class SessionFile:
    """A cookie jar persisted as one JSON file."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"SessionFile({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> list[Cookie]:
        """Read and deserialize the file."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SessionNotFoundError(
                "load_session", f"session file not found: {self.path}", cause=e
            ) from e
        except UnicodeDecodeError as e:
            raise DeserializeError(
                "load_session", f"session file is not UTF-8: {self.path}", cause=e
            ) from e
        except OSError as e:
            raise PersistError(
                "load_session", f"cannot read session file {self.path}: {e}", cause=e
            ) from e

        try:
            cookies = loads(text)
        except (ValueError, ValidationError) as e:
            raise DeserializeError(
                "load_session", f"corrupt session file {self.path}: {e}", cause=e
            ) from e

        logger.debug(f"Read {len(cookies)} cookies from {self.path}")
        return cookies

    def write(self, cookies: list[Cookie]) -> list[Cookie]:
        """Atomically replace the file with ``cookies``.

        Returns the cookies in the order they were written.
        """
        content = dumps(cookies)
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistError(
                "save_session", f"cannot write session file {self.path}: {e}", cause=e
            ) from e

        logger.debug(f"Wrote {len(cookies)} cookies to {self.path}")
        return sorted(cookies, key=lambda c: c.key)

    def remove(self) -> bool:
        """Delete the file. Returns False if there was nothing to delete."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistError(
                "clean_session", f"cannot remove session file {self.path}: {e}", cause=e
            ) from e
        return True
