"""
HTTP client for the tournament backend, with retry on transient failures.
"""
import logging
import os
import time

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'http://localhost:8000'


class ApiError(Exception):
    def __init__(self, message, status=0, payload=None):
        super().__init__(message)
        self.status = status
        self.payload = payload or {}


class AuthenticationRequired(ApiError):
    def __init__(self):
        super().__init__('Authentication required. Please log in again.', 401)


class ApiClient:
    def __init__(self, base_url=None, token=None, retry_attempts=3, retry_delay=1.0,
                 timeout=30, session=None, sleep=time.sleep):
        if retry_attempts < 1:
            raise ValueError(f'retry_attempts must be at least 1, got {retry_attempts}')
        self.base_url = (base_url or os.environ.get('BRACKET_API_URL', DEFAULT_BASE_URL)).rstrip('/')
        self.token = token if token is not None else os.environ.get('BRACKET_API_TOKEN')
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self._sleep = sleep

    def get_headers(self) -> dict:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def request(self, method: str, endpoint: str, params=None, json=None) -> dict:
        """
        Send a request, retrying network errors and 5xx responses.

        4xx responses and 2xx responses without a JSON body are raised
        immediately. A 401 also drops the token. The delay grows linearly:
        retry_delay * attempt.
        """
        url = f'{self.base_url}{endpoint}'

        for attempt in range(1, self.retry_attempts + 1):
            try:
                response = self.session.request(method, url, params=params, json=json,
                                                headers=self.get_headers(), timeout=self.timeout)
                if response.status_code == 401:
                    self.token = None
                    raise AuthenticationRequired()

                if not response.ok:
                    try:
                        payload = response.json()
                    except ValueError:
                        payload = {}
                    message = (payload.get('detail') or payload.get('message')
                               or f'HTTP {response.status_code}: {response.reason}')
                    raise ApiError(message, response.status_code, payload)

                if response.status_code == 204:
                    return {'success': True, 'data': None}
                try:
                    return response.json()
                except ValueError as e:
                    raise ApiError('Invalid JSON in server response.', response.status_code,
                                   {'originalError': str(e)}) from e

            except ApiError as e:
                if e.status < 500 or attempt == self.retry_attempts:
                    raise
                logger.warning(f'{method} {endpoint} failed (attempt {attempt}): {e}')
            except requests.exceptions.RequestException as e:
                if attempt == self.retry_attempts:
                    raise ApiError('Network error or server is unavailable.', 0,
                                   {'originalError': str(e)}) from e
                logger.warning(f'{method} {endpoint} network error (attempt {attempt}): {e}')

            self._sleep(self.retry_delay * attempt)

    def get(self, endpoint, params=None):
        return self.request('GET', endpoint, params=params)

    def post(self, endpoint, data=None):
        return self.request('POST', endpoint, json=data)

    def put(self, endpoint, data=None):
        return self.request('PUT', endpoint, json=data or {})

    def delete(self, endpoint):
        return self.request('DELETE', endpoint)

    # Tournament and bracket endpoints

    def get_tournaments(self, **params):
        return self.get('/api/tournaments', params=params)

    def get_tournament(self, tournament_id):
        return self.get(f'/api/tournaments/{tournament_id}')

    def get_tournament_participants(self, tournament_id):
        return self.get(f'/api/tournaments/{tournament_id}/participants')

    def get_tournament_brackets(self, tournament_id):
        return self.get(f'/api/tournaments/{tournament_id}/brackets')

    def create_tournament_brackets(self, tournament_id, bracket_data):
        return self.post(f'/api/tournaments/{tournament_id}/brackets', bracket_data)

    def update_match_result(self, tournament_id, match_id, result):
        return self.put(f'/api/tournaments/{tournament_id}/matches/{match_id}', result)
