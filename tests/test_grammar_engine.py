import pytest

from exceptions import GrammarDefinitionError, GrammarNotFoundError, MalformedInputError
from grammar import GrammarDefinition, GrammarEngine, VocabularyRole


@pytest.fixture
def transfer_grammar():
    return GrammarDefinition(
        id="transfer",
        name="Transfer discount",
        description="Riders transferring between lines",
        roles=[
            VocabularyRole(name="line", literals=["1号线", "2号线"], delimiter="换乘"),
            VocabularyRole(name="target", literals=["3号线"]),
        ],
        tags=["transit"],
    )


def test_loads_shipped_grammar(engine):
    assert engine.get_grammar("free_ride") is not None
    assert engine.check("free_ride", "韶关的老人") is True
    assert engine.check("free_ride", "韶关的年轻人") is False
    assert engine.check("free_ride", "韶关老人") is False


def test_evaluate_is_strict(engine):
    with pytest.raises(MalformedInputError):
        engine.evaluate("free_ride", "韶关老人")


def test_evaluate_detailed(engine):
    result = engine.evaluate_detailed("free_ride", "广州的妇女")
    assert result.matched is True
    assert result.grammar_id == "free_ride"


def test_unknown_grammar(engine):
    with pytest.raises(GrammarNotFoundError):
        engine.check("missing", "韶关的老人")


def test_missing_directory_loads_nothing(tmp_path):
    engine = GrammarEngine(grammars_path=str(tmp_path / "missing"))
    assert engine.list_grammars() == []
    assert not (tmp_path / "missing").exists()


def test_invalid_and_duplicate_grammars_are_skipped(grammars_dir):
    (grammars_dir / "single.yaml").write_text(
        "id: single\nname: Single\nroles:\n  - name: city\n    literals: [广州]\n",
        encoding="utf-8",
    )
    (grammars_dir / "zz_copy.yaml").write_text(
        (grammars_dir / "free_ride.yaml").read_text(encoding="utf-8"),
        encoding="utf-8",
    )

    engine = GrammarEngine(grammars_path=str(grammars_dir))
    assert [g.id for g in engine.list_grammars()] == ["free_ride"]


def test_disabled_grammar_has_no_context(engine, transfer_grammar):
    transfer_grammar.enabled = False
    engine.add_grammar(transfer_grammar)

    assert engine.get_grammar("transfer") is not None
    assert engine.list_grammars(enabled_only=True) == [engine.get_grammar("free_ride")]
    with pytest.raises(GrammarNotFoundError):
        engine.get_context("transfer")


def test_add_and_remove_grammar(engine, transfer_grammar):
    engine.add_grammar(transfer_grammar)
    assert engine.check("transfer", "1号线换乘3号线") is True
    assert engine.check("transfer", "3号线换乘1号线") is False

    engine.remove_grammar("transfer")
    assert engine.get_grammar("transfer") is None
    with pytest.raises(GrammarNotFoundError):
        engine.check("transfer", "1号线换乘3号线")


def test_remove_unknown_grammar(engine):
    assert engine.get_grammar("missing") is None
    with pytest.raises(GrammarNotFoundError):
        engine.remove_grammar("missing")
    assert [g.id for g in engine.list_grammars()] == ["free_ride"]


def test_add_duplicate_grammar(engine):
    with pytest.raises(GrammarDefinitionError):
        engine.add_grammar(engine.get_grammar("free_ride"))


def test_add_invalid_grammar(engine):
    grammar = GrammarDefinition(
        id="bad",
        name="Bad",
        roles=[VocabularyRole(name="city", literals=["广州"])],
    )
    with pytest.raises(GrammarDefinitionError):
        engine.add_grammar(grammar)
    assert engine.get_grammar("bad") is None


def test_list_grammars_by_tag(engine, transfer_grammar):
    transfer_grammar.tags = ["discount"]
    engine.add_grammar(transfer_grammar)

    assert [g.id for g in engine.list_grammars(tags=["discount"])] == ["transfer"]
    assert len(engine.list_grammars()) == 2


def test_save_and_reload(engine, transfer_grammar, grammars_dir):
    engine.add_grammar(transfer_grammar)
    engine.save_grammar_to_file("transfer")
    assert (grammars_dir / "transfer.yaml").exists()

    engine.reload_grammars()
    assert engine.check("transfer", "2号线换乘3号线") is True


def test_save_unknown_grammar(engine):
    with pytest.raises(GrammarNotFoundError):
        engine.save_grammar_to_file("missing")


def test_cache_enabled(grammars_dir):
    engine = GrammarEngine(grammars_path=str(grammars_dir), cache_enabled=True)
    engine.check("free_ride", "韶关的老人")
    engine.check("free_ride", "韶关的老人")
    assert engine.get_context("free_ride").cache_size() == 1


def test_summary(engine):
    summary = engine.get_summary()
    assert summary["total_grammars"] == 1
    assert summary["enabled_grammars"] == 1
    assert summary["grammar_ids"] == ["free_ride"]
