"""
routes/weather.py — Weather proxy and garden forecast routes.

Provides:
- GET /weather?provider=nws|openweathermap&lat=&lon=&days= — Proxied provider data
- GET /forecast?zipCode=27707[&refresh=true] — Ten-day garden forecast
- POST /forecast/refresh — Re-fetch cached forecasts (development only)

Upstream failures never surface as errors: /weather answers a fallback
marker and /forecast a forecast built from seasonal averages.
"""

from flask import Blueprint, current_app, jsonify, request

from weather import (
    CACHE_DURATION, DEFAULT_LAT, DEFAULT_LON, DEFAULT_ZIP_CODE, PROVIDERS,
    get_garden_forecast, parse_days, refresh_forecasts
)

weather_bp = Blueprint('weather', __name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET',
    'Access-Control-Allow-Headers': 'Content-Type',
}


@weather_bp.route('/weather', methods=['GET'])
def weather_proxy():
    """Proxy a provider forecast (JSON API)."""
    provider = request.args.get('provider', '')
    lat = request.args.get('lat') or DEFAULT_LAT
    lon = request.args.get('lon') or DEFAULT_LON
    days = parse_days(request.args.get('days'))

    fetch = PROVIDERS.get(provider)
    if fetch is None:
        return jsonify({'error': 'Unsupported provider'}), 400

    try:
        data = fetch(lat, lon, days)
    except Exception as e:
        current_app.logger.error("Weather API error (%s): %s", provider, e)
        response = jsonify({
            'error': 'Weather data unavailable',
            'fallback': True,
            'message': 'Using historical averages',
        })
        response.headers['Cache-Control'] = 'no-cache'
        return response

    response = jsonify(data)
    response.headers['Cache-Control'] = f'public, s-maxage={CACHE_DURATION}, stale-while-revalidate=3600'
    response.headers.update(CORS_HEADERS)
    return response


@weather_bp.route('/forecast', methods=['GET'])
def garden_forecast():
    """Ten-day garden forecast, served from cache when fresh (JSON API)."""
    zip_code = request.args.get('zipCode') or DEFAULT_ZIP_CODE
    refresh = request.args.get('refresh') == 'true'
    return jsonify(get_garden_forecast(zip_code, refresh=refresh))


@weather_bp.route('/forecast/refresh', methods=['POST'])
def refresh_forecast_cache():
    """Refresh cached forecasts. Only available in development."""
    if current_app.config.get('ENVIRONMENT') != 'development':
        return jsonify({'error': 'Not found'}), 404

    results = refresh_forecasts()
    current_app.logger.info("Forecast refresh: %s", results)
    return jsonify({'success': all(results.values()), 'results': results})
