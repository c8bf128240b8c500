"""Tests for the API endpoints using FastAPI's TestClient."""

import json

import app as app_module
import pytest
from app import SolarAdviceController, app
from fastapi.testclient import TestClient

OPTIONS = {
    "system": {
        "total_kwp": 4.0,
        "monthly_generation_factors": [1.0] * 12,
        "battery_capacity_kwh": 10.0,
        "battery_max_charge_rate_kwh": 10.0,
        "forecast_source": "manual",
    },
    "home": {"daily_consumption_kwh": 12.0},
    "tariffs": [
        {
            "id": "night",
            "name": "Night",
            "start_time": "00:00",
            "end_time": "05:00",
            "is_cheap": True,
            "rate": 10.0,
        },
        {
            "id": "day",
            "name": "Day",
            "start_time": "05:00",
            "end_time": "00:00",
            "is_cheap": False,
            "rate": 30.0,
        },
    ],
}

SUNNY_DAY = {
    "kind": "manual",
    "date": "2025-06-15",
    "sunrise": "06:00",
    "sunset": "18:00",
    "condition": "sunny",
}


@pytest.fixture
def controller(tmp_path, monkeypatch):
    """Controller loaded from a temporary options.json."""
    options_file = tmp_path / "options.json"
    options_file.write_text(json.dumps(OPTIONS))
    monkeypatch.setenv("OPTIONS_JSON", str(options_file))
    monkeypatch.setenv("CONFIG_YAML", str(tmp_path / "missing.yaml"))

    test_controller = SolarAdviceController()
    monkeypatch.setattr(app_module, "advice_controller", test_controller)
    return test_controller


@pytest.fixture
def client(controller):
    with TestClient(app) as test_client:
        yield test_client


class TestForecastEndpoint:
    def test_sunny_day(self, client):
        response = client.post("/api/forecast", json={"dayInput": SUNNY_DAY})

        assert response.status_code == 200
        data = response.json()
        assert data["dailyTotalGenerationKwh"] == pytest.approx(17.0)
        assert data["errorKind"] is None
        assert len(data["hourlyForecast"]) == 24
        assert data["hourlyForecast"][0]["time"] == "00:00"
        total_wh = sum(h["estimatedGenerationWh"] for h in data["hourlyForecast"])
        assert total_wh == pytest.approx(17000, abs=1)

    def test_invalid_daylight_is_reported_in_body(self, client):
        day = dict(SUNNY_DAY, sunrise="08:00", sunset="06:00")
        response = client.post("/api/forecast", json={"dayInput": day})

        assert response.status_code == 200
        data = response.json()
        assert data["errorKind"] == "InvalidDaylightWindow"
        assert data["dailyTotalGenerationKwh"] == 0
        assert data["hourlyForecast"] == []

    def test_configuration_override(self, client):
        response = client.post(
            "/api/forecast",
            json={"dayInput": SUNNY_DAY, "configuration": {"totalSystemKwp": None}},
        )

        assert response.status_code == 200
        assert response.json()["errorKind"] == "MissingSystemPower"

    def test_missing_day_input(self, client):
        response = client.post("/api/forecast", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required field: dayInput"

    def test_unknown_forecast_source(self, client):
        response = client.post(
            "/api/forecast",
            json={"dayInput": SUNNY_DAY, "configuration": {"forecastSource": "satellite"}},
        )
        assert response.status_code == 400


class TestAdviceEndpoint:
    def test_overnight_charge_from_forecast(self, client):
        forecast = {
            "date": "2025-06-16",
            "weatherConditionLabel": "rainy",
            "dailyTotalGenerationKwh": 0.0,
            "hourlyForecast": [
                {"time": f"{hour:02d}:00", "estimatedGenerationWh": 0.0} for hour in range(24)
            ],
        }
        response = client.post(
            "/api/advice",
            json={
                "forecast": forecast,
                "currentBatteryLevelKwh": 2.0,
                "hourlyConsumptionProfile": [0.5] * 24,
                "adviceType": "overnight",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["recommendChargeLater"] is True
        assert data["chargeNeededKwh"] == pytest.approx(8.0)
        assert data["chargeCostPence"] == pytest.approx(80.0)
        assert data["chargeWindow"] == "00:00 - 01:00 (Tomorrow)"
        assert data["errorKind"] is None

    def test_today_advice_from_day_input(self, client):
        response = client.post(
            "/api/advice",
            json={"dayInput": SUNNY_DAY, "currentBatteryLevelKwh": 8.0, "currentHour": 12},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["recommendChargeNow"] is False
        assert data["potentialSavingsKwh"] == pytest.approx(5.0)

    def test_missing_battery_capacity(self, client):
        response = client.post(
            "/api/advice",
            json={
                "dayInput": SUNNY_DAY,
                "configuration": {"totalSystemKwp": 4.0},
                "currentBatteryLevelKwh": 0.0,
                "currentHour": 9,
            },
        )

        assert response.status_code == 200
        assert response.json()["errorKind"] == "MissingBatteryCapacity"

    @pytest.mark.parametrize(
        "extra,message",
        [
            ({"hourlyConsumptionProfile": [0.5] * 12}, "24 entries"),
            ({"currentHour": 25}, "currentHour"),
            ({"adviceType": "weekly"}, "Unknown advice type"),
            ({"evNeed": {"chargeRequiredKwh": 5, "chargeByHour": 30}}, "chargeByHour"),
        ],
    )
    def test_malformed_payloads(self, client, extra, message):
        payload = {"dayInput": SUNNY_DAY, "currentBatteryLevelKwh": 5.0, **extra}
        response = client.post("/api/advice", json=payload)

        assert response.status_code == 400
        assert message in response.json()["detail"]

    def test_missing_battery_level(self, client):
        response = client.post("/api/advice", json={"dayInput": SUNNY_DAY})

        assert response.status_code == 400
        assert "currentBatteryLevelKwh" in response.json()["detail"]


class TestAdvisoryEndpoint:
    def test_advisory(self, client):
        tomorrow = dict(SUNNY_DAY, date="2025-06-16", condition="overcast")
        response = client.post(
            "/api/advisory",
            json={
                "todayInput": SUNNY_DAY,
                "tomorrowInput": tomorrow,
                "currentBatteryLevelKwh": 3.0,
                "currentHour": 14,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"todayForecast", "tomorrowForecast", "todayAdvice", "overnightAdvice"}
        assert data["todayForecast"]["dailyTotalGenerationKwh"] == pytest.approx(17.0)
        assert data["tomorrowForecast"]["dailyTotalGenerationKwh"] == pytest.approx(4.25)
        assert data["overnightAdvice"]["chargeNeededKwh"] == pytest.approx(7.0)
        assert data["overnightAdvice"]["chargeWindow"] == "00:00 - 01:00 (Tomorrow)"

    def test_home_settings_override(self, client):
        tomorrow = dict(SUNNY_DAY, date="2025-06-16")
        response = client.post(
            "/api/advisory",
            json={
                "todayInput": SUNNY_DAY,
                "tomorrowInput": tomorrow,
                "currentBatteryLevelKwh": 10.0,
                "currentHour": 14,
                "homeSettings": {
                    "dailyConsumptionKwh": 12.0,
                    "evChargeRequiredKwh": 10.0,
                    "evChargeByTime": "06:30",
                },
            },
        )

        assert response.status_code == 200
        overnight = response.json()["overnightAdvice"]
        assert overnight["evChargeWindow"] == "00:00 - 02:00 (Tomorrow)"


class TestSettingsEndpoints:
    def test_get_settings(self, client):
        response = client.get("/api/settings")

        assert response.status_code == 200
        data = response.json()
        assert data["system"]["totalSystemKwp"] == 4.0
        assert data["system"]["forecastSource"] == "manual"
        assert data["home"]["dailyConsumptionKwh"] == 12.0
        assert data["tariffs"][0] == {
            "id": "night",
            "name": "Night",
            "startTime": "00:00",
            "endTime": "05:00",
            "isCheap": True,
            "rate": 10.0,
        }

    def test_update_settings(self, client, controller):
        response = client.post(
            "/api/settings",
            json={"system": {"batteryCapacityKwh": 13.5}, "home": {"evChargeRequiredKwh": 20}},
        )

        assert response.status_code == 200
        assert controller.system_config.battery_capacity_kwh == 13.5
        assert controller.system_config.total_system_kwp == 4.0
        assert controller.home_settings.ev_charge_required_kwh == 20

    def test_invalid_update_leaves_settings_untouched(self, client, controller):
        response = client.post("/api/settings", json={"system": {"forecastSource": "satellite"}})

        assert response.status_code == 400
        assert controller.system_config.forecast_source.value == "manual"

    def test_update_tariffs(self, client, controller):
        response = client.post(
            "/api/settings",
            json={
                "tariffs": [
                    {
                        "id": "go",
                        "name": "Go",
                        "startTime": "00:30",
                        "endTime": "04:30",
                        "isCheap": True,
                        "rate": 8.5,
                    }
                ]
            },
        )

        assert response.status_code == 200
        assert [t.id for t in controller.tariffs] == ["go"]


class TestControllerOptions:
    def test_yaml_options_section(self, tmp_path, monkeypatch):
        config_yaml = tmp_path / "config.yaml"
        config_yaml.write_text(
            "options:\n"
            "  system:\n"
            "    panel_count: 10\n"
            "    panel_watts: 400\n"
            "    property_direction: West\n"
            "  tariffs:\n"
            "    - name: Night\n"
            "      start_time: '23:30'\n"
            "      end_time: '05:30'\n"
            "      is_cheap: true\n"
        )
        monkeypatch.setenv("OPTIONS_JSON", str(tmp_path / "missing.json"))
        monkeypatch.setenv("CONFIG_YAML", str(config_yaml))

        controller = SolarAdviceController()

        assert controller.system_config.total_system_kwp == 4.0
        assert controller.system_config.orientation_factor == 0.82
        assert controller.tariffs[0].id == "Night"
        assert controller.tariffs[0].rate is None

    def test_no_options_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPTIONS_JSON", str(tmp_path / "missing.json"))
        monkeypatch.setenv("CONFIG_YAML", str(tmp_path / "missing.yaml"))

        controller = SolarAdviceController()

        assert controller.system_config.total_system_kwp is None
        assert controller.tariffs == []

    def test_invalid_options_raise(self, tmp_path, monkeypatch):
        options_file = tmp_path / "options.json"
        options_file.write_text(json.dumps({"system": {"forecast_source": "satellite"}}))
        monkeypatch.setenv("OPTIONS_JSON", str(options_file))

        with pytest.raises(RuntimeError, match="Settings application failed"):
            SolarAdviceController()
