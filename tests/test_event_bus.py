from tenfall.events.bus import EventBus


def test_event_bus_emit_subscribe():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)

    bus.subscribe("test", handler)
    bus.emit("test", value=42, msg="hello")

    assert received["value"] == 42
    assert received["msg"] == "hello"


def test_event_bus_unsubscribe_stops_delivery():
    bus = EventBus()
    calls = []

    def handler(sender, **kwargs):
        calls.append(kwargs)

    bus.subscribe("ping", handler)
    bus.emit("ping", n=1)
    bus.unsubscribe("ping", handler)
    bus.emit("ping", n=2)

    assert calls == [{"n": 1}]


def test_emit_without_subscribers_is_noop():
    bus = EventBus()
    bus.emit("nobody_listens", value=1)


def test_unreferenced_lambda_subscribers_still_receive():
    bus = EventBus()
    order = []
    bus.subscribe("evt", lambda sender, **k: order.append("first"))
    bus.subscribe("evt", lambda sender, **k: order.append("second"))
    bus.emit("evt")
    assert sorted(order) == ["first", "second"]
