"""
Tests for stops, places, day grouping and leg chaining.
"""
from datetime import date

import pytest

from conftest import make_card, utc

from captainslog.models.voyage import Location, Stop
from captainslog.services.geo import distance_meters, meters_to_nautical_miles
from captainslog.services.itinerary import (
    annotate_gaps,
    build_places,
    build_schedule,
    build_stops,
    chain_legs,
    current_stop,
    future_stops,
    group_by_day,
)


def nm(a, b):
    return meters_to_nautical_miles(distance_meters(a.lat, a.lng, b.lat, b.lng))


class TestBuildStops:

    def test_only_due_cards_outside_trips(self, board):
        ids = [s.id for s in build_stops(board)]
        assert ids == ["c-marina", "c-bay", "c-cove", "c-harbour"]

    def test_sorted_by_due(self, board):
        board["cards"].reverse()
        stops = build_stops(board)
        assert [s.due for s in stops] == sorted(s.due for s in stops)

    def test_stop_fields(self, board):
        harbour = [s for s in build_stops(board) if s.id == "c-harbour"][0]
        assert harbour.list_name == "North Coast"
        assert harbour.navily_url == "https://navily.com/port/fishing-harbour"
        assert harbour.labels[0].name == "Fuel"
        assert harbour.labels[0].color == "#61bd4f"
        assert harbour.labels[1].color == "#888"
        assert harbour.due == utc(2025, 7, 4, 9, 0)

    def test_board_without_trips_list(self, board):
        board["lists"] = [lst for lst in board["lists"] if lst["name"] != "Trips"]
        board["cards"] = [c for c in board["cards"] if c["idList"] != "l-trips"]
        assert len(build_stops(board)) == 4

    def test_unparseable_due_is_skipped(self, board):
        board["cards"].append(make_card("c-bad", "Bad Date", due="next tuesday"))
        assert "c-bad" not in [s.id for s in build_stops(board)]


class TestBuildPlaces:

    def test_charted_undated_cards_only(self, board):
        assert [p.id for p in build_places(board)] == ["c-island"]

    def test_place_rating(self, board):
        assert build_places(board)[0].rating == 3


class TestCurrentStop:

    def test_due_complete_stop(self, board):
        assert current_stop(build_stops(board)).id == "c-marina"

    def test_none(self):
        assert current_stop([Stop(id="a", name="A", due=utc(2025, 7, 1))]) is None

    def test_several_marked_picks_latest_due(self):
        stops = [
            Stop(id="old", name="Old", due=utc(2025, 7, 1), due_complete=True),
            Stop(id="new", name="New", due=utc(2025, 7, 3), due_complete=True),
            Stop(id="mid", name="Mid", due=utc(2025, 7, 2), due_complete=True),
        ]
        assert current_stop(stops).id == "new"


class TestGroupByDay:

    def test_buckets_by_date(self, board):
        grouped = group_by_day(future_stops(build_stops(board)))
        assert list(grouped) == ["2025-07-02", "2025-07-04"]
        assert [s.id for s in grouped["2025-07-02"]] == ["c-bay", "c-cove"]

    def test_buckets_by_date_as_written(self, board):
        # 01:00 at +02:00 is still the previous day in UTC
        board["cards"].append(make_card("c-late", "Late Anchorage", due="2025-07-03T01:00:00+02:00",
                                        lat=50.15, lng=-4.9))
        grouped = group_by_day(future_stops(build_stops(board)))
        assert [s.id for s in grouped["2025-07-03"]] == ["c-late"]
        assert "c-late" not in [s.id for s in grouped["2025-07-02"]]

    def test_flattening_restores_chronological_order(self, board):
        stops = future_stops(build_stops(board))
        flattened = [s for day in group_by_day(list(reversed(stops))).values() for s in day]
        assert [s.id for s in flattened] == [s.id for s in stops]


class TestAnnotateGaps:

    def test_hours_and_overnight(self, board):
        annotated = annotate_gaps(future_stops(build_stops(board)))
        bay, cove, harbour = annotated
        assert bay.hours_to_next == pytest.approx(6.0)
        assert bay.overnight is False
        assert cove.hours_to_next == pytest.approx(41.0)
        assert cove.overnight is True
        assert harbour.hours_to_next is None
        assert harbour.overnight is False


class TestChainLegs:

    def test_chain_from_origin(self, board):
        stops = build_stops(board)
        marina, bay, cove, harbour = stops
        legs = chain_legs(marina, future_stops(stops), 5)
        assert legs[0].distance_nm == pytest.approx(nm(marina, bay))
        assert legs[1].distance_nm == pytest.approx(nm(bay, cove))
        assert legs[2].distance_nm == pytest.approx(nm(cove, harbour))
        assert legs[0].eta_hours == pytest.approx(nm(marina, bay) / 5)
        assert legs[0].eta == "1h 15m"

    def test_uncharted_stop_keeps_cursor(self):
        origin = Location(id="o", name="O", lat=50.0, lng=-5.0)
        stops = [
            Stop(id="x", name="X", due=utc(2025, 7, 2)),
            Stop(id="b", name="B", due=utc(2025, 7, 3), lat=51.0, lng=-5.0),
        ]
        legs = chain_legs(origin, stops, 6)
        assert legs[0].distance_nm is None
        assert legs[0].eta == ""
        assert legs[1].distance_nm == pytest.approx(60.0, abs=0.1)

    def test_no_origin(self, board):
        legs = chain_legs(None, future_stops(build_stops(board)), 5)
        assert legs[0].distance_nm is None
        assert legs[1].distance_nm is not None

    def test_zero_speed_has_no_eta(self, board):
        stops = build_stops(board)
        legs = chain_legs(stops[0], future_stops(stops), 0)
        assert legs[0].distance_nm > 0
        assert legs[0].eta_hours is None
        assert legs[0].eta == ""


class TestBuildSchedule:

    def test_viewer_sees_days_with_stops_only(self, board):
        schedule = build_schedule(build_stops(board), 5)
        assert [d.date for d in schedule.days] == ["2025-07-02", "2025-07-04"]
        assert schedule.current.id == "c-marina"
        assert schedule.can_plan is False

    def test_planner_sees_every_day(self, board):
        schedule = build_schedule(build_stops(board), 5, can_plan=True, today=date(2025, 7, 1))
        assert [d.date for d in schedule.days] == ["2025-07-01", "2025-07-02", "2025-07-03", "2025-07-04"]
        assert schedule.days[0].stops == []
        assert schedule.days[2].total_nm == 0

    def test_padding_starts_at_first_stop_when_today_is_later(self, board):
        schedule = build_schedule(build_stops(board), 5, can_plan=True, today=date(2025, 7, 3))
        assert schedule.days[0].date == "2025-07-02"

    def test_planner_with_no_stops_gets_today(self):
        schedule = build_schedule([], 5, can_plan=True, today=date(2025, 7, 1))
        assert [d.date for d in schedule.days] == ["2025-07-01"]

    def test_day_totals_and_continuous_chain(self, board):
        stops = build_stops(board)
        marina, bay, cove, harbour = stops
        schedule = build_schedule(stops, 5)
        first_day, second_day = schedule.days
        assert first_day.total_nm == pytest.approx(nm(marina, bay) + nm(bay, cove))
        # The first leg of a new day starts where the previous day ended
        assert second_day.total_nm == pytest.approx(nm(cove, harbour))
        assert schedule.total_nm == pytest.approx(first_day.total_nm + second_day.total_nm)
        assert schedule.total_hours == pytest.approx(schedule.total_nm / 5)

    def test_underway_origin(self, board):
        stops = build_stops(board)
        departure = Location(id="c-island", name="Bird Island", lat=50.3, lng=-4.8)
        schedule = build_schedule(stops, 5, origin=departure)
        assert schedule.origin.id == "c-island"
        assert schedule.days[0].stops[0].distance_nm == pytest.approx(nm(departure, stops[1]))

    def test_serialised_field_names(self, board):
        payload = build_schedule(build_stops(board), 5).model_dump(mode="json", by_alias=True)
        stop = payload["days"][0]["stops"][0]
        assert {"hoursToNext", "overnight", "distanceNm", "etaHours", "dueComplete", "listName"} <= set(stop)
        assert "totalNm" in payload["days"][0]
