import json

from quizsim.schemas import Question
from quizsim.services import store as store_mod
from quizsim.services.store import LAYOUT_VERSION, QuestionStore


def _q(text, grade="general", answer=0):
    return Question(id="x", question=text, options=["a", "b", "c", "d"],
                    correct_answer=answer, grade_level=grade)


def test_fetch_missing_key_is_empty(store):
    assert store.fetch_questions("nothing here") == []


def test_save_then_fetch_normalized_key(store):
    assert store.save_question("Math", "Algebra", "Grade 5", None, _q("What is x?", "Grade 5"))
    got = store.fetch_questions(" math ", "ALGEBRA", "grade-5")
    assert [q.question for q in got] == ["What is x?"]
    assert (store.root / "math__algebra__grade_5.json").exists()


def test_save_deduplicates_by_prompt(store):
    assert store.save_question("math", None, "general", None, _q("Same?")) is True
    assert store.save_question("math", None, "general", None, _q("Same?", answer=2)) is False
    assert len(store.fetch_questions("math", None, "general")) == 1


def test_stored_file_is_camel_case_array(store):
    store.save_question("math", None, "general", None, _q("Camel?"))
    data = json.loads((store.root / "math__general.json").read_text(encoding="utf-8"))
    assert isinstance(data, list)
    assert data[0]["correctAnswer"] == 0 and data[0]["gradeLevel"] == "general"


def test_unreadable_file_reads_as_empty(store):
    (store.root / "math__general.json").write_text("{not json", encoding="utf-8")
    assert store.fetch_questions("math", None, "general") == []


def test_invalid_records_are_skipped(store):
    records = [
        {"question": "ok?", "options": ["a", "b", "c", "d"], "correctAnswer": 1},
        {"question": "bad?", "options": ["a", "b"], "correctAnswer": 1},
    ]
    (store.root / "math.json").write_text(json.dumps(records), encoding="utf-8")
    got = store.fetch_questions("math")
    assert [q.question for q in got] == ["ok?"]


def test_write_errors_are_swallowed(store, monkeypatch):
    def boom(path, records):
        raise OSError("disk full")
    monkeypatch.setattr(store_mod, "_write_records", boom)
    assert store.save_question("math", None, "general", None, _q("Lost?")) is False


def test_list_topics_sorted_subtopicless_first(store):
    store.save_question("history", "Ancient Rome", "general", None, _q("Who?"))
    store.save_question("history", None, "general", None, _q("When?"))
    store.save_question("history", None, "general", None, _q("Where?"))
    store.save_question("Algebra", None, "Grade 5", "Common Core", _q("x?", "Grade 5").model_copy(
        update={"curriculum": "Common Core"}))

    topics = [(t.topic, t.subtopic, t.question_count) for t in store.list_topics()]
    assert topics == [
        ("algebra", None, 1),
        ("history", None, 2),
        ("history", "ancient rome", 1),
    ]


def test_fresh_directory_needs_no_migration(tmp_path):
    s = QuestionStore(tmp_path / "new")
    assert s.layout_version() == LAYOUT_VERSION
    assert s.migrate() == 0


def test_migrate_rekeys_and_merges_legacy_files(tmp_path):
    root = tmp_path / "legacy"
    root.mkdir()
    rec = lambda text: {"id": "q1", "question": text, "options": ["a", "b", "c", "d"], "correctAnswer": 0}
    (root / "world_history.json").write_text(json.dumps([rec("Q1"), rec("Q2")]), encoding="utf-8")
    (root / "world__history.json").write_text(json.dumps([rec("Q2"), rec("Q3")]), encoding="utf-8")
    (root / "science.json").write_text(json.dumps([rec("S1")]), encoding="utf-8")
    (root / "empty_topic.json").write_text("[]", encoding="utf-8")

    s = QuestionStore(root)
    assert s.layout_version() == 1
    assert s.migrate() == 1

    assert not (root / "world_history.json").exists()
    merged = json.loads((root / "world__history.json").read_text(encoding="utf-8"))
    assert [r["question"] for r in merged] == ["Q2", "Q3", "Q1"]
    assert (root / "science.json").exists()
    assert s.layout_version() == LAYOUT_VERSION

    # second run is a no-op
    assert s.migrate() == 0


def test_migrate_renames_when_target_missing(tmp_path):
    root = tmp_path / "legacy"
    root.mkdir()
    records = [{"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": 3}]
    (root / "math_fractions.json").write_text(json.dumps(records), encoding="utf-8")

    s = QuestionStore(root)
    assert s.migrate() == 1
    assert [q.question for q in s.fetch_questions("math", "fractions")] == ["Q?"]


def test_migrate_leaves_unreadable_files(tmp_path):
    root = tmp_path / "legacy"
    root.mkdir()
    (root / "math_broken.json").write_text("nope", encoding="utf-8")
    s = QuestionStore(root)
    assert s.migrate() == 0
    assert (root / "math_broken.json").exists()


def test_migrate_skips_underivable_names_and_finishes(tmp_path):
    root = tmp_path / "legacy"
    root.mkdir()
    rec = [{"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": 0}]
    for name in ("_.json", "_math_basics.json", "math_fractions.json"):
        (root / name).write_text(json.dumps(rec), encoding="utf-8")

    s = QuestionStore(root)
    assert s.migrate() == 2
    assert (root / "_.json").exists()
    assert [q.question for q in s.fetch_questions("math", "basics")] == ["Q?"]
    assert [q.question for q in s.fetch_questions("math", "fractions")] == ["Q?"]
    assert s.layout_version() == LAYOUT_VERSION


def test_migrate_leaves_double_separator_names(tmp_path):
    root = tmp_path / "legacy"
    root.mkdir()
    rec = [{"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": 0}]
    (root / "c__pointers.json").write_text(json.dumps(rec), encoding="utf-8")

    s = QuestionStore(root)
    assert s.migrate() == 0
    assert (root / "c__pointers.json").exists()


def test_list_topics_ignores_empty_files(store):
    (store.root / "math__general.json").write_text("[]", encoding="utf-8")
    (store.root / "history__general.json").write_text("{broken", encoding="utf-8")
    store.save_question("science", None, "general", None, _q("Why?"))
    assert [(t.topic, t.subtopic, t.question_count) for t in store.list_topics()] == [("science", None, 1)]
