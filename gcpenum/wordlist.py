"""
Keyword and suffix list loading, with a cached default wordlist.
"""

import logging
import os
import tempfile

import requests

WORDLIST_URL = "https://raw.githubusercontent.com/Vulnpire/gcpenum/refs/heads/main/utils/wordlist.txt"
WORDLIST_FILENAME = os.path.join(".config", "gcpenum", "words.txt")

logger = logging.getLogger(__name__)


class SetupError(Exception):
    """Raised for problems that must stop the run before any scanning."""


def read_lines(path: str) -> list:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]
    except (OSError, UnicodeDecodeError) as e:
        raise SetupError(f"Unable to read file: {e}") from e


def download_file(url: str, path: str, timeout: float = 30):
    r = requests.get(url, timeout=timeout)
    if r.status_code != 200:
        raise SetupError(f"failed to download file: {url} (status: {r.status_code})")
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    # Written next to the target and renamed, so a partial download is never cached.
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(r.content)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


def default_wordlist_path(home: str = None) -> str:
    home = home or os.path.expanduser("~")
    if not home or home == "~":
        raise SetupError("Unable to locate home directory")
    return os.path.join(home, WORDLIST_FILENAME)


def ensure_wordlist(home: str = None, url: str = WORDLIST_URL, echo=print) -> str:
    """Return the cached default wordlist path, downloading it on first use."""
    path = default_wordlist_path(home)
    if os.path.exists(path):
        echo(f"Using existing wordlist at {path}")
        return path

    echo(f"Wordlist not found. Downloading to {path}...")
    try:
        download_file(url, path)
    except (requests.RequestException, OSError) as e:
        raise SetupError(f"Failed to download wordlist: {e}") from e
    logger.debug("downloaded %s to %s", url, path)
    return path


def load_suffixes(path: str = None, echo=print) -> list:
    return read_lines(path or ensure_wordlist(echo=echo))


def load_keywords(keyword: str = None, keyword_list: str = None) -> list:
    if keyword_list:
        keywords = read_lines(keyword_list)
    elif keyword:
        keywords = [keyword]
    else:
        raise SetupError("Provide either a keyword (-n) or a keyword list file (-l)")
    if not keywords:
        raise SetupError(f"No keywords found in {keyword_list}")
    return keywords
