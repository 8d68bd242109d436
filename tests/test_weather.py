"""
tests/test_weather.py — Tests for the weather proxy and garden forecast.

Upstream HTTP is replaced with canned responses via monkeypatch.

Tests cover:
- Provider selection and defaults
- Success envelope and cache headers
- Fallback on every kind of upstream failure
- Forecast transformation (daily metrics, extension, summary, alerts)
- Forecast caching
"""

import pytest
import os
import tempfile
from datetime import date

import requests

import weather
from app import create_app
from storage import KeyValueStore, forecast_key


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.ok = 200 <= status_code < 300

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


POINTS = {'properties': {'cwa': 'RAH', 'gridX': 58, 'gridY': 63}}


def nws_period(start, temperature, precip=10, short='Sunny', wind='5 mph'):
    return {
        'startTime': start,
        'temperature': temperature,
        'probabilityOfPrecipitation': {'value': precip},
        'shortForecast': short,
        'detailedForecast': short,
        'windSpeed': wind,
        'windDirection': 'SW',
    }


DAILY = {'properties': {'periods': [
    nws_period('2026-07-01T06:00:00-04:00', 92, precip=85, short='Thunderstorms'),
    nws_period('2026-07-01T18:00:00-04:00', 74),
    nws_period('2026-07-02T06:00:00-04:00', 95),
    nws_period('2026-07-03T06:00:00-04:00', 33, short='Light Rain', precip=30),
]}}

HOURLY = {'properties': {'periods': [
    {'startTime': '2026-07-01T03:00:00-04:00', 'temperature': 71, 'relativeHumidity': {'value': 80}},
    {'startTime': '2026-07-01T15:00:00-04:00', 'temperature': 92, 'relativeHumidity': {'value': 50}},
]}}


def fake_get(routes, calls=None):
    """requests.get replacement answering by URL suffix."""
    def _get(url, params=None, headers=None, timeout=None):
        if calls is not None:
            calls.append(url)
        for suffix, response in routes.items():
            if url.endswith(suffix):
                if isinstance(response, Exception):
                    raise response
                return response
        return FakeResponse(status_code=404)
    return _get


NWS_ROUTES = {
    '/points/35.9940,-78.8986': FakeResponse(POINTS),
    '/gridpoints/RAH/58,63/forecast': FakeResponse(DAILY),
    '/gridpoints/RAH/58,63/forecast/hourly': FakeResponse(HOURLY),
}


@pytest.fixture
def app():
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    app = create_app({
        'TESTING': True,
        'KV_DATABASE': db_path,
        'OPENWEATHERMAP_API_KEY': 'test-key',
        'ENVIRONMENT': 'production',
    })

    yield app

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    return app.test_client()


# ========================================
# /weather proxy
# ========================================

def test_unsupported_provider(client):
    rv = client.get('/weather?provider=accuweather')
    assert rv.status_code == 400
    assert rv.get_json() == {'error': 'Unsupported provider'}

    assert client.get('/weather').status_code == 400


def test_nws_success(client, monkeypatch):
    calls = []
    monkeypatch.setattr(weather.requests, 'get', fake_get(NWS_ROUTES, calls))

    rv = client.get('/weather?provider=nws')
    assert rv.status_code == 200
    data = rv.get_json()
    assert data['provider'] == 'nws'
    assert data['cached'] is False
    assert data['data'] == DAILY
    assert data['timestamp'].endswith('Z')
    assert rv.headers['Cache-Control'] == 'public, s-maxage=21600, stale-while-revalidate=3600'
    assert rv.headers['Access-Control-Allow-Origin'] == '*'
    # default Durham coordinates
    assert calls[0] == 'https://api.weather.gov/points/35.9940,-78.8986'


def test_openweathermap_success(client, monkeypatch):
    seen = {}

    def _get(url, params=None, headers=None, timeout=None):
        seen.update(params)
        return FakeResponse({'list': []})

    monkeypatch.setattr(weather.requests, 'get', _get)
    rv = client.get('/weather?provider=openweathermap&lat=40&lon=-75&days=abc')
    assert rv.status_code == 200
    assert rv.get_json()['provider'] == 'openweathermap'
    assert seen == {'lat': '40', 'lon': '-75', 'appid': 'test-key', 'units': 'imperial'}


@pytest.mark.parametrize('routes', [
    {'/points/35.9940,-78.8986': FakeResponse(status_code=500)},
    {'/points/35.9940,-78.8986': requests.ConnectionError('offline')},
    {'/points/35.9940,-78.8986': requests.Timeout('slow')},
    {'/points/35.9940,-78.8986': FakeResponse(ValueError('bad json'))},
    {'/points/35.9940,-78.8986': FakeResponse({'properties': {}})},
    {'/points/35.9940,-78.8986': FakeResponse(POINTS),
     '/gridpoints/RAH/58,63/forecast': FakeResponse(status_code=503)},
])
def test_nws_failure_falls_back(client, monkeypatch, routes):
    monkeypatch.setattr(weather.requests, 'get', fake_get(routes))
    rv = client.get('/weather?provider=nws')
    assert rv.status_code == 200
    assert rv.get_json() == {
        'error': 'Weather data unavailable',
        'fallback': True,
        'message': 'Using historical averages',
    }
    assert rv.headers['Cache-Control'] == 'no-cache'


def test_unexpected_client_error_falls_back(client, monkeypatch):
    def broken_get(url, params=None, headers=None, timeout=None):
        raise AttributeError("'NoneType' object has no attribute 'read'")

    monkeypatch.setattr(weather.requests, 'get', broken_get)
    rv = client.get('/weather?provider=nws')
    assert rv.status_code == 200
    assert rv.get_json()['fallback'] is True
    assert rv.headers['Cache-Control'] == 'no-cache'

    rv = client.get('/forecast')
    assert rv.status_code == 200
    assert rv.get_json()['fallback'] is True


def test_openweathermap_without_key_falls_back(app, client, monkeypatch):
    app.config['OPENWEATHERMAP_API_KEY'] = ''
    monkeypatch.delenv('OPENWEATHERMAP_API_KEY', raising=False)
    rv = client.get('/weather?provider=openweathermap')
    assert rv.status_code == 200
    assert rv.get_json()['fallback'] is True


def test_parse_days():
    assert weather.parse_days('3') == 3
    assert weather.parse_days(None) == 7
    assert weather.parse_days('soon') == 7
    assert weather.parse_days('0') == 7


# ========================================
# Forecast transformation
# ========================================

def test_transform_daily_metrics():
    result = weather.transform_for_garden_planning({'forecast': DAILY, 'hourly': HOURLY})
    days = result['dailyForecasts']
    assert len(days) == 10

    first = days[0]
    assert first['date'] == '2026-07-01'
    assert first['dayOfWeek'] == 'Wednesday'
    assert first['highTemp'] == 92
    assert first['lowTemp'] == 71
    assert first['avgTemp'] == 81.5
    assert first['growingDegreeDays'] == 31.5
    assert first['humidity'] == 65
    assert first['heatStress'] is True
    assert first['frostRisk'] is False
    assert first['precipAmount'] == 0.5
    assert 'Hot' in first['gardenConditions']
    assert 'Skip watering - rain expected' in first['recommendedActions']

    # no hourly data: low is estimated 18°F below the high
    assert days[1]['date'] == '2026-07-02'
    assert days[1]['lowTemp'] == 77

    assert days[2]['frostRisk'] is True
    assert days[2]['precipAmount'] == 0.1

    # days beyond the NWS periods are projected
    assert all(d.get('projected') for d in days[3:])
    assert days[3]['date'] == '2026-07-04'


def test_transform_alerts_and_summary():
    result = weather.transform_for_garden_planning({'forecast': DAILY, 'hourly': HOURLY})
    summary = result['summary']
    assert summary['maxTemp'] >= 95
    assert summary['frostDays'] == 1
    assert summary['heatStressDays'] == 2

    alert_types = [a['type'] for a in result['gardenAlerts']]
    assert 'frost' in alert_types
    assert 'rain' in alert_types
    assert 'heat' not in alert_types

    factors = result['simulationFactors']
    assert 0 <= factors['temperatureStability'] <= 100
    assert 0 <= factors['moistureIndex'] <= 100
    assert factors['riskFactors']['frost'] is True


def test_transform_without_periods_uses_averages():
    result = weather.transform_for_garden_planning({'forecast': None, 'hourly': None})
    assert len(result['dailyForecasts']) == 10
    assert all(d['fallback'] for d in result['dailyForecasts'])


def test_fallback_frost_risk_follows_low(monkeypatch):
    monkeypatch.setattr(weather.random, 'uniform', lambda a, b: a)
    days = weather.fallback_days(start=date(2026, 1, 10), days=3)
    for day in days:
        assert day['highTemp'] == 50
        assert day['lowTemp'] == 31
        assert day['frostRisk'] is True


def test_fallback_forecast_uses_monthly_averages():
    forecast = weather.generate_fallback_forecast('27707', start=date(2026, 1, 10))
    days = forecast['dailyForecasts']
    assert forecast['fallback'] is True
    assert len(days) == 10
    assert days[0]['date'] == '2026-01-10'
    for day in days:
        assert 50 <= day['highTemp'] <= 60
        assert 31 <= day['lowTemp'] <= 39


def test_heat_index_and_wind_chill():
    assert weather.calculate_heat_index(75, 90) == 75
    assert weather.calculate_heat_index(95, 60) > 95
    assert weather.calculate_wind_chill(60, '20 mph') == 60
    assert weather.calculate_wind_chill(30, '10 to 15 mph') < 30
    assert weather.parse_wind_speed('5 to 10 mph') == 10
    assert weather.parse_wind_speed(None) == 0


# ========================================
# /forecast and caching
# ========================================

def test_forecast_fetches_then_caches(client, monkeypatch):
    calls = []
    monkeypatch.setattr(weather.requests, 'get', fake_get(NWS_ROUTES, calls))

    rv = client.get('/forecast')
    data = rv.get_json()
    assert rv.status_code == 200
    assert data['success'] is True
    assert data['cached'] is False
    assert len(data['data']['dailyForecasts']) == 10
    fetches = len(calls)

    rv = client.get('/forecast?zipCode=27707')
    assert rv.get_json()['cached'] is True
    assert len(calls) == fetches

    rv = client.get('/forecast?refresh=true')
    assert rv.get_json()['cached'] is False
    assert len(calls) > fetches


def test_stale_cache_is_refetched(app, monkeypatch):
    store = KeyValueStore(app.config['KV_DATABASE'])
    store.set(forecast_key('27707'), {'forecast': DAILY, 'hourly': None,
                                      'timestamp': '2020-01-01T00:00:00.000Z'})
    assert weather.get_cached_forecast('27707', store=store) is None


def test_forecast_failure_returns_fallback(client, monkeypatch):
    monkeypatch.setattr(weather.requests, 'get', fake_get({}))
    rv = client.get('/forecast')
    assert rv.status_code == 200
    data = rv.get_json()
    assert data['success'] is False
    assert data['fallback'] is True
    assert data['error'] == 'Weather service unavailable'
    assert len(data['data']['dailyForecasts']) == 10


def test_refresh_only_in_development(app, client, monkeypatch):
    assert client.post('/forecast/refresh').status_code == 404

    app.config['ENVIRONMENT'] = 'development'
    monkeypatch.setattr(weather.requests, 'get', fake_get(NWS_ROUTES))
    rv = client.post('/forecast/refresh')
    assert rv.status_code == 200
    assert rv.get_json() == {'success': True, 'results': {'27707': True}}
