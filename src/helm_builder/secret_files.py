"""Temporary plaintext copies of sops-encrypted values files."""

from __future__ import annotations

import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .errors import check_result

if TYPE_CHECKING:
    from .shell_commands import SopsCommands


@contextmanager
def decrypted_secrets(
    sops: SopsCommands, secret_files: Sequence[str]
) -> Iterator[list[Path]]:
    """Decrypt each secret file into a private temporary file.

    The plaintext files exist only inside the ``with`` block. They are
    deleted on exit, including when decryption of a later file or the
    surrounding deployment fails.

    Args:
        sops: sops commands
        secret_files: Encrypted values files, in order

    Yields:
        Paths of the decrypted files, in the same order

    Raises:
        CommandError: If sops cannot decrypt a file
    """
    plaintext_files: list[Path] = []
    try:
        for secret_file in secret_files:
            result = check_result(
                sops.decrypt(Path(secret_file)), f"decrypting {secret_file}"
            )
            with tempfile.NamedTemporaryFile(
                mode="w", prefix="secrets-", suffix=".yaml", delete=False
            ) as f:
                plaintext_files.append(Path(f.name))
                f.write(result.stdout)
            logger.debug("decrypted {} to {}", secret_file, f.name)
        yield plaintext_files
    finally:
        for path in plaintext_files:
            path.unlink(missing_ok=True)
        if plaintext_files:
            logger.debug("removed {} decrypted secret file(s)", len(plaintext_files))
