"""Merge engine: concatenation, dedupe by normalized label, stable sort."""

from cdpspec.catalog import CatalogState, merge_catalog
from cdpspec.models import CatalogRecord, Origin


def auth(label, identity=None):
    return CatalogRecord(label=label, origin=Origin.AUTHORITATIVE, identity=identity)


def gen(label, sequence=0):
    return CatalogRecord(label=label, origin=Origin.GENERATED, sequence=sequence)


class TestMergeCatalog:

    def test_sorted_regardless_of_input_order(self):
        view = merge_catalog([auth("B"), auth("A")], [])
        assert [r.label for r in view] == ["A", "B"]

    def test_dedupe_keeps_authoritative(self):
        view = merge_catalog([auth("Sony CDP-101", "7")], [gen("SONY CDP-101")])
        assert len(view) == 1
        assert view[0].origin is Origin.AUTHORITATIVE
        assert view[0].identity == "7"

    def test_dedupe_within_one_source_keeps_first(self):
        view = merge_catalog([auth("CDP-337ESD", "1"), auth("cdp 337 esd", "2")], [])
        assert [r.identity for r in view] == ["1"]

    def test_without_dedupe_both_survive_in_label_order(self):
        view = merge_catalog([auth("Sony CDP-101")], [gen("SONY CDP-101")], dedupe=False)
        # Uppercase sorts before lowercase in plain string comparison.
        assert [r.label for r in view] == ["SONY CDP-101", "Sony CDP-101"]

    def test_equal_labels_keep_concatenation_order(self):
        view = merge_catalog([auth("DENON DCD-1500", "1")], [gen("DENON DCD-1500")], dedupe=False)
        assert [r.origin for r in view] == [Origin.AUTHORITATIVE, Origin.GENERATED]

    def test_cardinality_without_collisions(self):
        view = merge_catalog([auth("A"), auth("C")], [gen("B"), gen("D")])
        assert [r.label for r in view] == ["A", "B", "C", "D"]

    def test_empty_inputs(self):
        assert merge_catalog([], []) == []


class TestCatalogState:

    def test_generated_records_are_prepended_with_sequence(self):
        state = CatalogState()
        first = state.add_generated("REGA PLANET", "CS4328", "KSS-213")
        second = state.add_generated("ARCAM ALPHA", "PCM67", "CDM-4")
        assert [r.label for r in state.generated] == ["ARCAM ALPHA", "REGA PLANET"]
        assert (first.sequence, second.sequence) == (0, 1)
        assert first.origin is Origin.GENERATED
        assert first.identity is None

    def test_view_reflects_every_mutation(self):
        state = CatalogState()
        state.replace_authoritative([auth("B"), auth("A")])
        assert [r.label for r in state.view] == ["A", "B"]
        state.add_generated("AA", "x", "y")
        assert [r.label for r in state.view] == ["A", "AA", "B"]
        state.replace_authoritative([auth("Z")])
        assert [r.label for r in state.view] == ["AA", "Z"]

    def test_reload_replaces_wholesale(self):
        state = CatalogState()
        state.replace_authoritative([auth("A"), auth("B")])
        state.replace_authoritative([auth("C")])
        assert [r.label for r in state.authoritative] == ["C"]

    def test_dedupe_flag_is_honoured(self):
        state = CatalogState(dedupe=False)
        state.replace_authoritative([auth("Sony CDP-101")])
        state.add_generated("SONY CDP-101", "x", "y")
        assert len(state.view) == 2


def test_record_keys():
    assert auth("A", "42").key == "42"
    assert gen("REGA PLANET", 3).key == "generated-REGA PLANET-3"
