"""Tests for TemplateRecord."""

import re
import time

import pytest

from playtpl.errors import TemplateStateError
from playtpl.template.record import TemplateRecord


class TestTemplateRecord:

    def test_single_argument_is_the_source(self):
        record = TemplateRecord("Hello")
        assert record.source == "Hello"
        assert record.path == "Hello"
        assert re.fullmatch(r"[0-9a-f-]{36}", record.name)

    def test_named_record_keeps_path_and_source_apart(self):
        record = TemplateRecord("views/index.tpl", name="index", source="<p>hi</p>")
        assert record.name == "index"
        assert record.path == "views/index.tpl"
        assert record.get_source() == "<p>hi</p>"

    def test_generated_names_are_unique(self):
        assert TemplateRecord("a").name != TemplateRecord("a").name

    def test_initial_state(self):
        record = TemplateRecord("x")
        assert record.compiled_output == ""
        assert record.line_map == []
        assert isinstance(record.created_at, int)
        assert record.created_at > 0

    def test_created_at_is_epoch_milliseconds(self):
        before = int(time.time() * 1000)
        record = TemplateRecord("x")
        after = int(time.time() * 1000)
        assert before - 1 <= record.created_at <= after + 1

    def test_source_is_immutable_once_sealed(self):
        record = TemplateRecord("x")
        record.set_source("y")
        record.seal()
        with pytest.raises(TemplateStateError):
            record.set_source("z")
        assert record.source == "y"

    def test_finalize_drops_source(self):
        record = TemplateRecord("x")
        record.compiled_output = "out"
        record.finalize()
        assert record.source == ""
        assert record.get_compiled_output() == "out"

    def test_compiled_bytes(self):
        record = TemplateRecord("x")
        record.compiled_output = "ё"
        assert record.get_compiled_bytes() == "ё".encode("utf-8")

    def test_to_dict_shape(self):
        record = TemplateRecord("p", name="n", source="s")
        record.line_map.append(3)
        data = record.to_dict()
        assert set(data) == {"name", "source", "compiled_output", "line_map", "created_at"}
        assert data["line_map"] == [3]
        data["line_map"].append(4)
        assert record.line_map == [3]
