"""Tests for element observers and the default form policy."""

import pytest

from tessera.engine.markup import HookPriority, MarkupHooks, create_default_markup
from tessera.engine.parser import create_template
from tessera.expressions.nodes import FnExpression
from tessera.templates.nodes import ElementOn


PREVENT_DEFAULT = FnExpression(["$preventDefault"])


def test_form_with_submit_gets_prevent_default():
    (form,) = create_template('<form on="submit: save()"><input name="q"></form>')
    assert form.hooks == [
        ElementOn("submit", FnExpression(["save"])),
        ElementOn("submit", PREVENT_DEFAULT),
    ]


def test_form_without_submit_is_untouched():
    (form,) = create_template('<form on="reset: clear()"></form>')
    assert [hook.name for hook in form.hooks] == ["reset"]
    (form,) = create_template("<form></form>")
    assert form.hooks is None


def test_existing_prevent_default_is_not_duplicated():
    (form,) = create_template('<form on="submit: $preventDefault()"></form>')
    assert form.hooks == [ElementOn("submit", PREVENT_DEFAULT)]


def test_custom_markup_replaces_defaults():
    (form,) = create_template('<form on="submit: save()"></form>', markup=MarkupHooks())
    assert len(form.hooks) == 1


def test_observers_see_finished_element():
    seen = []
    markup = MarkupHooks()
    markup.on("element:ul", lambda element: seen.append([child.tag_name for child in element.content]))
    create_template("<ul><li></li><li></li></ul>", markup=markup)
    assert seen == [["li", "li"]]


def test_void_elements_are_observed():
    seen = []
    markup = MarkupHooks()
    markup.on("element:input", seen.append)
    create_template('<p><input type="text"><br></p>', markup=markup)
    assert [element.tag_name for element in seen] == ["input"]


def test_priority_order():
    calls = []
    markup = MarkupHooks()

    @markup.handler("element:div", priority=HookPriority.LOW.value)
    def low(element):
        calls.append("low")

    @markup.handler("element:div", priority=HookPriority.HIGH.value)
    def high(element):
        calls.append("high")

    markup.on("element:div", lambda element: calls.append("normal"))
    create_template("<div></div>", markup=markup)
    assert calls == ["high", "normal", "low"]


def test_remove_and_introspection():
    markup = create_default_markup()
    assert markup.has_handlers("element:form")
    assert len(markup) == 1

    def noop(element):
        pass

    markup.on("element:a", noop)
    assert markup.remove("element:a", noop)
    assert not markup.remove("element:a", noop)
    assert not markup.has_handlers("element:a")


def test_observer_errors_propagate():
    markup = MarkupHooks()

    def fail(element):
        raise ValueError("rejected")

    markup.on("element:p", fail)
    with pytest.raises(ValueError, match="rejected"):
        create_template("<p></p>", markup=markup)
