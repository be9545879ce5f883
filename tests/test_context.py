import threading
from unittest.mock import MagicMock

import pytest

from exceptions import GrammarDefinitionError, MalformedInputError
from grammar import Context, ConjunctionNode, TerminalNode


@pytest.mark.parametrize("text,expected", [
    ("韶关的老人", True),
    ("韶关的年轻人", False),
    ("广州的妇女", True),
    ("广州的儿童", True),
    ("山东的儿童", False),
    ("韶关老人", False),
])
def test_check_fare_scenarios(free_ride, text, expected):
    assert free_ride.check(text) is expected


def test_evaluate_is_strict(free_ride):
    with pytest.raises(MalformedInputError):
        free_ride.evaluate("韶关老人")


@pytest.mark.parametrize("text", ["", "的", "韶关的", "的老人", "韶关的老人的", "韶关老人", "的的的"])
def test_check_never_raises(free_ride, text):
    assert free_ride.check(text) is False


def test_evaluation_is_idempotent(free_ride):
    results = {free_ride.check("广州的妇女") for _ in range(5)}
    assert results == {True}


def test_build_shapes_right_nested_tree():
    context = Context.build(
        [("city", ["广州"]), ("person", ["老人"]), ("time", ["周末"])],
        delimiter="的",
    )
    root = context.root
    assert isinstance(root, ConjunctionNode)
    assert isinstance(root.left, TerminalNode)
    assert isinstance(root.right, ConjunctionNode)
    assert context.roles == ("city", "person", "time")

    assert context.check("广州的老人的周末") is True
    assert context.check("广州的老人的工作日") is False
    assert context.check("广州的老人") is False


def test_build_with_per_level_delimiters():
    context = Context.build(
        [("city", ["广州"]), ("person", ["老人"]), ("time", ["周末"])],
        delimiter=["的", "在"],
    )
    assert context.evaluate("广州的老人在周末") is True
    with pytest.raises(MalformedInputError):
        context.evaluate("广州的老人的周末")


def test_build_requires_two_roles():
    with pytest.raises(GrammarDefinitionError):
        Context.build([("city", ["广州"])])


def test_build_rejects_empty_vocabulary():
    with pytest.raises(GrammarDefinitionError):
        Context.build([("city", ["广州"]), ("person", [])])


@pytest.mark.parametrize("delimiter", ["", ["的", "在"], [""]])
def test_build_rejects_bad_delimiters(delimiter):
    with pytest.raises(GrammarDefinitionError):
        Context.build([("city", ["广州"]), ("person", ["老人"])], delimiter=delimiter)


@pytest.mark.parametrize("vocabularies,delimiter", [
    ([("location", ["韶关"]), ("vehicle", ["的士"])], "的"),
    ([("location", ["韶关", ""]), ("category", ["老人"])], "的"),
    ([("city", ["广州"]), ("person", ["在职老人"]), ("time", ["周末"])], ["的", "在"]),
])
def test_build_rejects_unreachable_literals(vocabularies, delimiter):
    with pytest.raises(GrammarDefinitionError) as exc_info:
        Context.build(vocabularies, delimiter=delimiter)
    assert exc_info.value.context["errors"]


def test_build_allows_delimiter_of_non_adjoining_level():
    context = Context.build(
        [("city", ["广州"]), ("person", ["老人"]), ("time", ["的时候"])],
        delimiter=["在", "于"],
    )
    assert context.check("广州在老人于的时候") is True


def test_context_requires_predicate_root():
    with pytest.raises(GrammarDefinitionError):
        Context("not a predicate")


def test_evaluate_detailed(free_ride):
    accepted = free_ride.evaluate_detailed("韶关的老人")
    assert accepted.matched is True
    assert accepted.malformed is False
    assert accepted.grammar_id == "free_ride"

    rejected = free_ride.evaluate_detailed("山东的儿童")
    assert rejected.matched is False
    assert rejected.malformed is False
    assert rejected.error is None

    malformed = free_ride.evaluate_detailed("韶关老人")
    assert malformed.matched is False
    assert malformed.malformed is True
    assert "韶关老人" in malformed.error


def test_describe(free_ride):
    assert free_ride.describe() == "location(广州|韶关) 的 category(儿童|妇女|老人)"


def test_cache_computes_each_input_once():
    root = MagicMock(spec=TerminalNode)
    root.evaluate.return_value = True
    context = Context(root, cache_enabled=True)

    assert context.evaluate("a") is True
    assert context.evaluate("a") is True
    assert context.evaluate("b") is True

    assert root.evaluate.call_count == 2
    assert context.cache_size() == 2


def test_cache_replays_malformed_input():
    context = Context.build(
        [("location", ["韶关"]), ("category", ["老人"])],
        cache_enabled=True,
    )
    for _ in range(2):
        with pytest.raises(MalformedInputError):
            context.evaluate("韶关老人")
    assert context.check("韶关老人") is False
    assert context.cache_size() == 1


def test_cache_respects_size_limit():
    root = MagicMock(spec=TerminalNode)
    root.evaluate.return_value = False
    context = Context(root, cache_enabled=True, cache_max_entries=1)

    context.evaluate("a")
    context.evaluate("b")
    context.evaluate("b")

    assert context.cache_size() == 1
    assert root.evaluate.call_count == 3


def test_cache_is_thread_safe():
    root = MagicMock(spec=TerminalNode)
    root.evaluate.return_value = True
    context = Context(root, cache_enabled=True)

    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(context.evaluate("韶关的老人"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == [True] * 8
    assert root.evaluate.call_count == 1


def test_cache_evaluates_distinct_inputs_concurrently():
    slow_started = threading.Event()
    release_slow = threading.Event()

    def evaluate(text):
        if text == "slow":
            slow_started.set()
            assert release_slow.wait(timeout=5)
        return text == "fast"

    root = MagicMock(spec=TerminalNode)
    root.evaluate.side_effect = evaluate
    context = Context(root, cache_enabled=True)

    slow_results = []
    slow = threading.Thread(target=lambda: slow_results.append(context.evaluate("slow")))
    slow.start()
    assert slow_started.wait(timeout=5)

    # "slow" is still computing; a different input must not wait for it
    assert context.evaluate("fast") is True

    release_slow.set()
    slow.join(timeout=5)
    assert slow_results == [False]
    assert context.cache_size() == 2
