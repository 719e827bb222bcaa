from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from conftest import NOW, device_payload
from models.records import Metric, Rollup, SensorSnapshot
from storage.sun_cache import SunTimesCache


def _seed_month(fake_api) -> None:
    """Daily rollups for three days plus 4h rollups for the same days."""
    fake_api.set_series(
        Metric.temperature,
        Rollup.one_day,
        [
            ["2025-05-29T00:00:00Z", 25.0],
            ["2025-05-30T00:00:00Z", 26.0],
            ["2025-05-31T00:00:00Z", 27.0],
        ],
    )
    fake_api.set_series(
        Metric.humidity,
        Rollup.one_day,
        [["2025-05-30T00:00:00Z", 80.0], ["2025-05-31T00:00:00Z", 60.0], ["2025-05-28T00:00:00Z", 40.0]],
    )
    fake_api.set_series(Metric.pm25, Rollup.one_day, [["2025-05-31T00:00:00Z", 7.6]])
    fake_api.set_series(
        Metric.temperature,
        Rollup.four_hours,
        [
            ["2025-05-29T04:00:00Z", 20.0],
            ["2025-05-29T12:00:00Z", 30.0],
            ["2025-05-30T04:00:00Z", 8.0],
            ["2025-05-30T12:00:00Z", 12.0],
            ["2025-05-31T04:00:00Z", 28.4],
            ["2025-05-31T12:00:00Z", 35.6],
            ["2025-06-01T00:00:00Z", 30.0],
            ["2025-06-01T12:00:00Z", 22.0],
        ],
    )


def test_today_high_low_from_history_only(fake_api, make_service) -> None:
    fake_api.set_series(
        Metric.temperature,
        Rollup.four_hours,
        [["2025-06-01T00:00:00Z", 30], ["2025-06-01T12:00:00Z", 22]],
    )
    fake_api.device = device_payload(temperature=None)
    service = make_service()

    snapshot = asyncio.run(service.snapshot("19225"))
    extrema = asyncio.run(service.high_low("19225", snapshot))

    assert (extrema.high, extrema.low) == (30.0, 22.0)


def test_today_high_low_blends_live_value(fake_api, make_service) -> None:
    fake_api.device = device_payload(temperature=19.4)
    service = make_service()

    snapshot = asyncio.run(service.snapshot("19225"))
    extrema = asyncio.run(service.high_low("19225", snapshot))

    assert extrema.high == extrema.low == 19.4


def test_stale_live_reading_is_not_blended(fake_api, make_service) -> None:
    fake_api.device = device_payload(temperature=40.0, last_reading_at="2025-05-30T22:00:00Z")
    _seed_month(fake_api)
    service = make_service()

    snapshot = asyncio.run(service.snapshot("19225"))
    extrema = asyncio.run(service.high_low("19225", snapshot))

    assert (extrema.high, extrema.low) == (12.0, 8.0)
    request = fake_api.requests_to("/readings")[-1]
    assert request.url.params["from"] == "2025-05-30"
    assert request.url.params["to"] == "2025-05-31"
    assert request.url.params["rollup"] == "4h"


def test_day_high_low_only_uses_readings_of_that_day(fake_api, make_service) -> None:
    _seed_month(fake_api)
    service = make_service()

    # The fake API also answers the 2025-05-31 points for this window.
    extrema = asyncio.run(service.day_high_low("19225", Metric.temperature, "2025-05-30"))

    assert (extrema.high, extrema.low) == (12.0, 8.0)


def test_recent_days_today_first_then_prior_days(fake_api, make_service) -> None:
    _seed_month(fake_api)
    service = make_service()

    day_list = asyncio.run(service.recent_days("19225", Metric.temperature, live_value=31.2))

    assert [item.date for item in day_list.items] == ["2025-06-01", "2025-05-31", "2025-05-30", "2025-05-29"]
    today = day_list.items[0]
    assert today.is_today
    assert (today.high, today.low) == (31.2, 22.0)
    assert day_list.items[1].high_display == "36°C"
    assert day_list.empty_message is None
    daily = [r for r in fake_api.requests_to("/readings") if r.url.params["rollup"] == "1d"]
    assert daily[0].url.params["from"] == "2025-05-27"
    assert daily[0].url.params["to"] == "2025-06-01"


def test_recent_days_caps_prior_days(fake_api, make_service) -> None:
    fake_api.set_series(
        Metric.noise,
        Rollup.one_day,
        [[f"2025-05-{day:02d}T00:00:00Z", 50.0] for day in range(25, 32)],
    )
    fake_api.set_series(
        Metric.noise,
        Rollup.four_hours,
        [[f"2025-05-{day:02d}T08:00:00Z", 45.0 + day] for day in range(25, 32)],
    )
    service = make_service()

    day_list = asyncio.run(service.recent_days("19225", Metric.noise, live_value=52.0))

    assert [item.date for item in day_list.items] == [
        "2025-06-01",
        "2025-05-31",
        "2025-05-30",
        "2025-05-29",
        "2025-05-28",
    ]


def test_recent_days_empty(fake_api, make_service) -> None:
    service = make_service()

    day_list = asyncio.run(service.recent_days("19225", Metric.pm25, live_value=None))

    assert day_list.items == []
    assert day_list.empty_message == "No history found."


def test_history_cards(fake_api, make_service) -> None:
    _seed_month(fake_api)
    fake_api.sun["2025-05-31"] = {
        "sunrise": "2025-05-31T03:06:00+00:00",
        "sunset": "2025-05-31T17:40:00+00:00",
    }
    service = make_service()

    snapshot = asyncio.run(service.snapshot("19225"))
    history = asyncio.run(service.history("19225", snapshot))

    assert [card.date for card in history.cards] == ["2025-05-31", "2025-05-30", "2025-05-29"]
    latest, middle, oldest = history.cards
    assert (latest.high_display, latest.low_display) == ("36°C", "28°C")
    assert latest.tag_class == "tag-orange"
    assert latest.sun_text == "Sunrise: 06:06 / Sunset: 20:40"
    assert latest.pm25_display == "8 µg/m³"
    assert latest.icon == "cloud"
    assert middle.icon == "rain_cloud"
    assert middle.tag_class == "tag-blue"
    assert middle.sun_text == "Sunrise: --:-- / Sunset: --:--"
    assert oldest.humidity_display == "-%"
    assert oldest.tag_class == "tag-orange"

    daily = [r for r in fake_api.requests_to("/readings") if r.url.params["rollup"] == "1d"]
    assert sorted(r.url.params["sensor_id"] for r in daily) == ["194", "53", "55", "56"]
    assert all(r.url.params["from"] == "2025-05-02" for r in daily)


def test_history_without_temperature_days(fake_api, make_service) -> None:
    fake_api.set_series(Metric.humidity, Rollup.one_day, [["2025-05-31T00:00:00Z", 60.0]])
    service = make_service()

    snapshot = asyncio.run(service.snapshot("19225"))
    history = asyncio.run(service.history("19225", snapshot))

    assert history.cards == []
    assert history.empty_message == "No history data found."


def test_build_dashboard_offline(fake_api, make_service) -> None:
    fake_api.device_status = 500
    service = make_service()

    view = asyncio.run(service.build_dashboard("19225"))

    assert view.online is False
    assert view.label == "Sensor Offline or No Data"
    assert view.highlights == []
    assert view.history is None
    assert fake_api.requests_to("/readings") == []


def test_build_dashboard_online(fake_api, make_service) -> None:
    _seed_month(fake_api)
    fake_api.device = device_payload(temperature=24.3, humidity=65.0, pm25=8.0, noise=48.0)
    service = make_service()

    view = asyncio.run(service.build_dashboard("19225"))

    assert view.online is True
    assert view.label == "Moudros - Web2Learn-gym-Moudros - 39.87703 - 25.27187"
    tags = {card.metric: card.tag for card in view.highlights}
    assert tags == {
        Metric.temperature: "comfortable",
        Metric.humidity: "light-green",
        Metric.pm25: "light-green",
        Metric.noise: "light-green",
    }
    assert view.high_low.high_display == "30°C"
    assert view.high_low.low_display == "22°C"
    assert [day_list.metric for day_list in view.day_lists] == list(Metric)
    assert view.condition.icon == "mist"
    assert view.condition.day_time == "Sunday, 18:30"
    assert view.realtime["pm25"] == "8 µg/m³"
    assert len(view.history.cards) == 3


def test_build_dashboard_is_idempotent(fake_api, make_service) -> None:
    _seed_month(fake_api)
    service = make_service()

    first = asyncio.run(service.build_dashboard("19225"))
    second = asyncio.run(service.build_dashboard("19225"))

    assert first == second


def test_today_follows_utc_date(make_service) -> None:
    late = datetime(2025, 5, 31, 23, 30, tzinfo=timezone.utc)

    assert make_service(now=late).today().isoformat() == "2025-05-31"
    assert make_service(now=NOW).today().isoformat() == "2025-06-01"


def test_recent_days_without_today_uses_all_slots(fake_api, make_service) -> None:
    fake_api.set_series(
        Metric.humidity,
        Rollup.one_day,
        [[f"2025-05-{day:02d}T00:00:00Z", 50.0] for day in range(27, 32)],
    )
    fake_api.set_series(
        Metric.humidity,
        Rollup.four_hours,
        [[f"2025-05-{day:02d}T08:00:00Z", 40.0 + day] for day in range(27, 32)],
    )
    service = make_service()

    day_list = asyncio.run(service.recent_days("19225", Metric.humidity, live_value=None))

    assert [item.date for item in day_list.items] == [
        "2025-05-31",
        "2025-05-30",
        "2025-05-29",
        "2025-05-28",
        "2025-05-27",
    ]
    assert not any(item.is_today for item in day_list.items)


def test_live_value_only_when_read_today(fake_api, make_service) -> None:
    fake_api.device = device_payload(temperature=40.0, last_reading_at="2025-05-28T22:00:00Z")
    service = make_service()
    stale = asyncio.run(service.snapshot("19225"))

    assert service.live_value(stale, Metric.temperature) is None

    fake_api.device = device_payload(temperature=21.5)
    fresh = asyncio.run(service.snapshot("19225"))
    assert service.live_value(fresh, Metric.temperature) == 21.5
    assert service.live_value(SensorSnapshot(), Metric.temperature) is None


def test_build_dashboard_stale_device_has_no_today_row(fake_api, make_service) -> None:
    fake_api.device = device_payload(temperature=40.0, last_reading_at="2025-05-28T22:00:00Z")
    service = make_service()

    view = asyncio.run(service.build_dashboard("19225"))

    temperature_list = next(day_list for day_list in view.day_lists if day_list.metric == Metric.temperature)
    assert temperature_list.items == []
    assert temperature_list.empty_message == "No history found."


def test_history_fills_injected_sun_cache(fake_api, make_service) -> None:
    fake_api.set_series(Metric.temperature, Rollup.one_day, [["2025-05-31T00:00:00Z", 27.0]])
    fake_api.sun["2025-05-31"] = {
        "sunrise": "2025-05-31T03:06:00+00:00",
        "sunset": "2025-05-31T17:40:00+00:00",
    }
    cache = SunTimesCache()
    service = make_service(cache=cache)

    snapshot = asyncio.run(service.snapshot("19225"))
    asyncio.run(service.history("19225", snapshot))
    asyncio.run(service.history("19225", snapshot))

    assert len(cache) == 1
    assert len(fake_api.requests_to("/json")) == 1
