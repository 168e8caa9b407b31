"""Unit tests for the Google Custom Search client."""

import pytest
import requests

from argo_assistant import web_search
from argo_assistant.web_search import SEARCH_URL, search_google

ITEMS = [{"title": "Ocean salinity", "snippet": "About 35 PSU", "link": "https://noaa.gov"}]


@pytest.fixture(name="http")
def http_fixture(mocker):
    """Mock requests session answering with one result item."""
    mocker.patch.object(web_search.settings, "GOOGLE_API_KEY", "key-123")
    mocker.patch.object(web_search.settings, "GOOGLE_CSE_ID", "cx-456")
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value.json.return_value = {"items": ITEMS}
    return session


def test_request_parameters(http):
    """Query is biased toward oceanography with safe search, five results and a 15s timeout."""
    assert search_google("pacific salinity", session=http) == ITEMS
    http.get.assert_called_once_with(
        SEARCH_URL,
        params={
            "key": "key-123",
            "cx": "cx-456",
            "q": "pacific salinity oceanography ocean data",
            "num": 5,
            "safe": "active",
        },
        timeout=15,
    )
    http.get.return_value.raise_for_status.assert_called_once_with()


def test_explicit_num_and_timeout(http):
    search_google("tides", num=3, timeout=2, session=http)
    kwargs = http.get.call_args.kwargs
    assert kwargs["params"]["num"] == 3
    assert kwargs["timeout"] == 2


def test_http_error_raised(http):
    """HTTP errors propagate; the retriever turns them into a degraded step."""
    http.get.return_value.raise_for_status.side_effect = requests.HTTPError("403 Forbidden")
    with pytest.raises(requests.HTTPError):
        search_google("tides", session=http)
    http.get.return_value.json.assert_not_called()


def test_no_items(http):
    http.get.return_value.json.return_value = {"searchInformation": {"totalResults": "0"}}
    assert search_google("tides", session=http) == []
