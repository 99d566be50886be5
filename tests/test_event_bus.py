"""EventBus 테스트"""

from src.core.event_bus import MAX_DEPTH, EventBus, GameEvent
from src.core.event_types import EventTypes


def _event(event_type: str = EventTypes.ITEM_BOUGHT, source: str = "test") -> GameEvent:
    return GameEvent(event_type=event_type, data={"session_id": "s1"}, source=source)


class TestSubscribeEmit:
    def test_basic_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_BOUGHT, received.append)
        bus.emit(_event())
        assert len(received) == 1
        assert received[0].data["session_id"] == "s1"

    def test_multiple_handlers_in_order(self):
        bus = EventBus()
        results = []
        bus.subscribe("evt", lambda e: results.append("a"))
        bus.subscribe("evt", lambda e: results.append("b"))
        bus.emit(_event("evt"))
        assert results == ["a", "b"]

    def test_no_handlers(self):
        """구독자 없는 이벤트 발행 - 에러 없이 무시"""
        EventBus().emit(_event("no_one_listens"))

    def test_other_event_type_not_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_SOLD, received.append)
        bus.emit(_event(EventTypes.ITEM_BOUGHT))
        assert received == []


class TestUnsubscribe:
    def test_returned_callable_unsubscribes(self):
        bus = EventBus()
        received = []
        off = bus.subscribe("evt", received.append)
        off()
        bus.emit(_event("evt"))
        assert received == []
        assert bus.handler_count == 0

    def test_unsubscribe_by_handler(self):
        bus = EventBus()
        received = []
        handler = lambda e: received.append(e)  # noqa: E731
        bus.subscribe("evt", handler)
        bus.unsubscribe("evt", handler)
        bus.emit(_event("evt"))
        assert received == []

    def test_unsubscribe_nonexistent(self):
        """미등록 핸들러 해제 - 경고만, 에러 없음"""
        EventBus().unsubscribe("evt", lambda e: None)

    def test_unsubscribe_during_emit(self):
        """핸들러 안에서 해제해도 이번 발행의 나머지 핸들러는 호출된다"""
        bus = EventBus()
        results = []
        offs = []

        def first(e):
            results.append("first")
            offs[0]()

        bus.subscribe("evt", first)
        offs.append(bus.subscribe("evt", lambda e: results.append("second")))
        bus.emit(_event("evt"))
        assert results == ["first", "second"]
        assert bus.handler_count == 1


class TestDepthLimit:
    def test_max_depth_prevents_infinite_loop(self):
        bus = EventBus()
        call_count = 0

        def recursive_handler(event: GameEvent):
            nonlocal call_count
            call_count += 1
            # 다른 source로 발행해서 중복 체크를 우회
            bus.emit(_event("chain", source=f"handler_{call_count}"))

        bus.subscribe("chain", recursive_handler)
        bus.emit(_event("chain", source="origin"))
        assert call_count == MAX_DEPTH


class TestDuplicatePrevention:
    def test_same_source_same_event_blocked(self):
        bus = EventBus()
        count = 0

        def handler(event: GameEvent):
            nonlocal count
            count += 1
            bus.emit(_event("evt", source="same_source"))

        bus.subscribe("evt", handler)
        bus.emit(_event("evt", source="same_source"))
        assert count == 1

    def test_different_source_allowed(self):
        bus = EventBus()
        received = []
        bus.subscribe("evt", lambda e: received.append(e.source))
        bus.emit(_event("evt", source="source_a"))
        bus.emit(_event("evt", source="source_b"))
        assert received == ["source_a", "source_b"]


class TestResetChain:
    def test_reset_allows_re_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe("re", lambda e: received.append(1))
        bus.emit(_event("re", source="s"))
        bus.reset_chain()
        bus.emit(_event("re", source="s"))
        assert len(received) == 2


class TestHandlerError:
    def test_handler_exception_doesnt_stop_others(self):
        bus = EventBus()
        results = []

        def bad_handler(e):
            raise ValueError("boom")

        bus.subscribe("evt", bad_handler)
        bus.subscribe("evt", lambda e: results.append("ok"))
        bus.emit(_event("evt"))
        assert results == ["ok"]


class TestClear:
    def test_clear_removes_all(self):
        bus = EventBus()
        bus.subscribe("a", lambda e: None)
        bus.subscribe("b", lambda e: None)
        assert bus.handler_count == 2
        bus.clear()
        assert bus.handler_count == 0
