import pytest

from mdview.api import MarkdownView, MarkdownViewSpec, ObjectMeta
from mdview.webhook import (
    FieldError,
    FieldErrorType,
    InvalidError,
    default,
    validate,
    validate_create,
    validate_delete,
    validate_update,
)


def _view(markdowns=None, replicas=1, viewer_image="", name="sample"):
    return MarkdownView(
        metadata=ObjectMeta(name=name, namespace="default"),
        spec=MarkdownViewSpec(
            markdowns={"SUMMARY.md": "summary"} if markdowns is None else markdowns,
            replicas=replicas,
            viewer_image=viewer_image,
        ),
    )


def test_default_fills_empty_viewer_image():
    view = _view()
    result = default(view)
    assert result.spec.viewer_image == "peaceiris/mdbook:latest"
    assert view.spec.viewer_image == "peaceiris/mdbook:latest"


def test_default_keeps_given_viewer_image():
    view = _view(viewer_image="peaceiris/mdbook:0.4.10")
    default(view)
    assert view.spec.viewer_image == "peaceiris/mdbook:0.4.10"


def test_default_leaves_other_fields_alone():
    view = _view(markdowns={"SUMMARY.md": "s", "page.md": "p"}, replicas=2)
    expected = view.deep_copy()
    expected.spec.viewer_image = "peaceiris/mdbook:latest"
    assert default(view).spec == expected.spec


def test_deny_empty_markdowns():
    with pytest.raises(InvalidError) as info:
        validate_create(_view(markdowns={}))
    assert "markdowns must have SUMMARY.md." in str(info.value)


@pytest.mark.parametrize("replicas", [0, 6, -1])
def test_deny_invalid_replicas(replicas):
    with pytest.raises(InvalidError) as info:
        validate_create(_view(replicas=replicas))
    assert "replicas must be in the range of 1 to 5." in info.value.message
    assert [e.field for e in info.value.errors] == ["spec.replicas"]


def test_deny_without_summary():
    with pytest.raises(InvalidError) as info:
        validate_create(_view(markdowns={"page1.md": "page1"}))
    assert "markdowns must have SUMMARY.md." in str(info.value)
    assert info.value.errors[0].type is FieldErrorType.REQUIRED


@pytest.mark.parametrize("replicas", [1, 3, 5])
def test_admit_valid(replicas):
    view = _view(markdowns={"SUMMARY.md": "summary", "page1.md": "page1"}, replicas=replicas)
    assert validate_create(view) == []


def test_multiple_errors_reported_together():
    with pytest.raises(InvalidError) as info:
        validate(_view(markdowns={}, replicas=10, name="bad"))
    err = info.value
    assert len(err.errors) == 2
    assert err.name == "bad"
    assert err.kind == "MarkdownView"
    assert err.group == "view.zoetrope.github.io"
    text = str(err)
    assert text.startswith('MarkdownView.view.zoetrope.github.io "bad" is invalid: [')
    assert "replicas must be in the range of 1 to 5." in text
    assert "markdowns must have SUMMARY.md." in text


def test_invalid_field_error_mentions_bad_value():
    error = FieldError(
        type=FieldErrorType.INVALID, field="spec.replicas", detail="bad", bad_value=9
    )
    assert "9" in str(error)
    assert str(error).startswith("spec.replicas: ")


def test_validate_update_applies_same_rules():
    old = _view()
    assert validate_update(_view(replicas=2), old) == []
    with pytest.raises(InvalidError):
        validate_update(_view(replicas=7), old)


def test_validate_delete_always_allows():
    assert validate_delete(_view(markdowns={}, replicas=0)) == []