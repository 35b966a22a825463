"""Tests for the dependents graph"""

from mingpkg.core.dependents import DependentsGraph

from conftest import full


def test_empty_record(config):
    graph = DependentsGraph(config)
    assert graph.dependents_of(full("zlib")) == []


def test_add_is_deduplicated(config):
    graph = DependentsGraph(config)
    assert graph.add(full("zlib"), full("curl"))
    assert not graph.add(full("zlib"), full("curl"))
    assert graph.add(full("zlib"), full("libpng"))

    assert graph.dependents_of(full("zlib")) == [full("curl"), full("libpng")]
    path = config.index_dir / full("zlib") / "dependents"
    assert path.read_text().splitlines() == [full("curl"), full("libpng")]


def test_no_self_edges(config):
    graph = DependentsGraph(config)
    assert not graph.add(full("zlib"), full("zlib"))
    assert graph.dependents_of(full("zlib")) == []


def test_drop(config):
    graph = DependentsGraph(config)
    graph.add(full("zlib"), full("curl"))
    graph.drop(full("zlib"))
    assert graph.dependents_of(full("zlib")) == []
    # Dropping twice is harmless
    graph.drop(full("zlib"))
