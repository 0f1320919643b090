from pixel_marker.core.annotation.events import AnnotationEvent, EventEmitter, EventType


def test_emit_reaches_subscribers():
    emitter = EventEmitter()
    received = []
    emitter.on(EventType.MARKER_ADDED, received.append)

    emitter.emit(AnnotationEvent(EventType.MARKER_ADDED, {"number": 1}))
    emitter.emit(AnnotationEvent(EventType.ALL_CLEARED))

    assert len(received) == 1
    assert received[0].data == {"number": 1}


def test_event_data_defaults_to_dict():
    assert AnnotationEvent(EventType.UNDONE).data == {}


def test_off_unsubscribes():
    emitter = EventEmitter()
    received = []
    emitter.on(EventType.UNDONE, received.append)
    emitter.off(EventType.UNDONE, received.append)

    emitter.emit(AnnotationEvent(EventType.UNDONE))

    assert received == []


def test_failing_listener_does_not_block_others(caplog):
    emitter = EventEmitter()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    emitter.on(EventType.STATE_CHANGED, broken)
    emitter.on(EventType.STATE_CHANGED, received.append)

    emitter.emit(AnnotationEvent(EventType.STATE_CHANGED))

    assert len(received) == 1
    assert "state_changed" in caplog.text


def test_on_any_and_clear():
    emitter = EventEmitter()
    received = []
    emitter.on_any(received.append)

    emitter.emit(AnnotationEvent(EventType.IMAGE_LOADED))
    emitter.emit(AnnotationEvent(EventType.TOOL_CHANGED))
    emitter.clear()
    emitter.emit(AnnotationEvent(EventType.UNDONE))

    assert [e.event_type for e in received] == [
        EventType.IMAGE_LOADED,
        EventType.TOOL_CHANGED,
    ]
