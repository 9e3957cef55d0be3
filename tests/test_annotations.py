from quickc.inline_run.annotations import EditorAnnotationState, InlineAnnotation


def test_for_result_picks_colors():
    ok = InlineAnnotation.for_result(3, "hi", is_error=False, inline_color="grey")
    bad = InlineAnnotation.for_result(3, "Error: x", is_error=True, inline_color="grey")
    assert ok.color == "grey"
    assert bad.color == "red"
    assert bad.is_error is True


def test_show_replaces_previous_annotation():
    changes = []
    state = EditorAnnotationState(on_changed=lambda: changes.append(state.current))
    first = InlineAnnotation(line=1, text="one", color="grey")
    second = InlineAnnotation(line=4, text="two", color="grey")

    assert state.show(first) is True
    assert state.show(second) is True
    assert state.current == second
    # Every transition goes through "no annotation" before the next one appears.
    assert changes == [first, None, second]


def test_whitespace_text_leaves_no_annotation():
    state = EditorAnnotationState()
    state.show(InlineAnnotation(line=0, text="hi", color="grey"))
    assert state.show(InlineAnnotation(line=0, text="  \n ", color="grey")) is False
    assert state.current is None
    assert state.has_annotation() is False


def test_clear_is_idempotent():
    state = EditorAnnotationState()
    assert state.clear() is False
    state.show(InlineAnnotation(line=0, text="hi", color="grey"))
    assert state.clear() is True
    assert state.clear() is False
