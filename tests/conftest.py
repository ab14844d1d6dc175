"""Shared pytest fixtures for all tests."""

import os
from datetime import datetime, timezone

import pytest

from gsc.config import Config
from gsc.errors import BadLocalPath, NoSuchLocalFile, UnknownHomework
from gsc.messages import FilePurpose, FileMeta


def make_meta(hw, name, purpose=FilePurpose.SOURCE, byte_count=10):
    """Build a FileMeta the way the server would describe a file."""
    return FileMeta(
        hw=hw,
        byte_count=byte_count,
        media_type='text/plain',
        name=name,
        purpose=purpose,
        upload_time=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        uri=f'/api/submissions/{hw}/files/{name}',
    )


class FakeServer:
    """
    In-memory stand-in for the file listing and transfer side of GscClient.

    Files are stored per homework as name -> (content, purpose).
    """

    def __init__(self):
        self.files = {}
        self.uploads = []
        self.downloads = []

    def add(self, hw, name, content=b'', purpose=FilePurpose.SOURCE):
        self.files.setdefault(hw, {})[name] = (content, purpose)

    def fetch_file_list(self, user, hw):
        if hw not in self.files:
            raise UnknownHomework(hw)
        return [
            make_meta(hw, name, purpose, len(content))
            for name, (content, purpose) in sorted(self.files[hw].items())
        ]

    def upload_file(self, user, src, dst):
        if os.path.isdir(src):
            raise BadLocalPath(src)
        if not os.path.exists(src):
            raise NoSuchLocalFile(src)
        with open(src, 'rb') as f:
            content = f.read()
        self.files.setdefault(dst.hw, {})[dst.name] = (content, FilePurpose.SOURCE)
        self.uploads.append((src, str(dst)))

    def download_file(self, meta, dst):
        content, _ = self.files[meta.hw][meta.name]
        parent = os.path.dirname(dst)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(dst, 'wb') as f:
            f.write(content)
        self.downloads.append((str(meta), dst))


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .gsc directory
    """
    config_dir = tmp_path / '.gsc'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def logged_in_config(temp_config):
    """Config with a username and session cookie already stored."""
    temp_config.set_username('alice')
    temp_config.set_cookie('session', 'abc123')
    return temp_config


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'lab.c'
    file_path.write_text('int main(void) { return 0; }\n')
    return file_path


@pytest.fixture
def multiple_sample_files(tmp_path):
    """
    Create multiple sample files for testing bulk operations.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        List of Paths to sample files
    """
    files = []
    for i in range(3):
        file_path = tmp_path / f'part{i}.c'
        file_path.write_text(f'/* part {i} */\n')
        files.append(file_path)
    return files


@pytest.fixture
def fake_server():
    return FakeServer()
