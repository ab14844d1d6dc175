"""Tests for the file listing service."""

import typing

import pytest

from gsc.errors import MultipleSourcesOneDestination, NoSuchRemoteFile, UnknownHomework
from gsc.listing import FileListing
from gsc.messages import FileMeta
from gsc.paths import RemotePattern


@pytest.fixture
def listing(fake_server):
    fake_server.add(3, 'main.c')
    fake_server.add(3, 'util.c')
    fake_server.add(3, 'notes.txt')
    return FileListing(fake_server, 'alice')


def test_list_returns_every_file(listing):
    names = [meta.name for meta in listing.list(3)]

    assert names == ['main.c', 'notes.txt', 'util.c']


def test_list_matching_filters_by_glob(listing):
    names = [meta.name for meta in listing.list_matching(RemotePattern(3, '*.c'))]

    assert names == ['main.c', 'util.c']


def test_list_matching_whole_homework(listing):
    assert len(listing.list_matching(RemotePattern(3, ''))) == 3


def test_require_nonempty_matching_raises(listing):
    with pytest.raises(NoSuchRemoteFile) as exc_info:
        listing.require_nonempty_matching(RemotePattern(3, '*.h'))

    assert str(exc_info.value.pattern) == 'hw3:*.h'


def test_require_exactly_one_matching(listing):
    meta = listing.require_exactly_one_matching(RemotePattern(3, 'n*'))
    assert meta.name == 'notes.txt'

    with pytest.raises(MultipleSourcesOneDestination):
        listing.require_exactly_one_matching(RemotePattern(3, '*.c'))

    with pytest.raises(NoSuchRemoteFile):
        listing.require_exactly_one_matching(RemotePattern(3, 'missing'))


def test_find_exact_ignores_glob_characters(listing, fake_server):
    fake_server.add(3, '*.c')

    assert listing.find_exact(3, '*.c').name == '*.c'
    assert listing.find_exact(3, 'nope.c') is None


def test_unknown_homework_propagates(listing):
    with pytest.raises(UnknownHomework):
        listing.list(9)


def test_annotations_resolve_to_builtin_list():
    """The ``list`` method must not shadow the builtin in return annotations."""
    hints = typing.get_type_hints(FileListing.list_matching)

    assert hints['return'] == list[FileMeta]
