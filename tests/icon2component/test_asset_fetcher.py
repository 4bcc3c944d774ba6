"""
Tests for the icon service client.

This module tests listing icons and downloading their images with a mocked
requests session.
"""

import time
import pytest
from unittest.mock import MagicMock
import requests

from iconship.core.error_handler import FetchError
from iconship.core.models import RawAsset
from iconship.icon2component.asset_fetcher import AssetFetcher

BASE_URL = "http://icons.test"

def make_response(json_data=None, text=""):
    """
    Create a mock response.
    """
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = json_data
    response.text = text
    return response

class TestAssetFetcher:
    """
    Tests for the AssetFetcher class.
    """

    def setup_method(self):
        """
        Set up test environment.
        """
        self.session = MagicMock()
        self.fetcher = AssetFetcher(
            base_url=BASE_URL + "/",
            max_workers=4,
            timeout=5,
            max_retries=1,
            retry_delay=0,
            session=self.session
        )

        self.listing = {
            "result": {
                "icons": [
                    {
                        "iconId": 3,
                        "iconImages": [
                            {"imageName": "arrow-left.svg", "iconImagePath": "images/3/arrow-left.svg"},
                            {"imageName": "arrow-left-bold.svg", "iconImagePath": "/images/3/arrow-left-bold.svg"},
                        ]
                    },
                    {"iconId": 2, "iconImages": []},
                    {"iconId": 1, "iconImages": [{"imageName": "home.svg", "iconImagePath": "images/1/home.svg"}]},
                ]
            }
        }
        self.markup = {
            f"{BASE_URL}/images/3/arrow-left.svg": "<svg>left</svg>",
            f"{BASE_URL}/images/3/arrow-left-bold.svg": "<svg>bold</svg>",
            f"{BASE_URL}/images/1/home.svg": "<svg>home</svg>",
        }

        self.session.post.return_value = make_response(self.listing)
        self.session.get.side_effect = lambda url, **kwargs: make_response(text=self.markup[url])

    def test_init_clamps_workers(self):
        """
        Test that the number of workers stays between 1 and 16.
        """
        assert AssetFetcher(base_url=BASE_URL, max_workers=100, session=self.session).max_workers == 16
        assert AssetFetcher(base_url=BASE_URL, max_workers=-3, session=self.session).max_workers == 1
        assert self.fetcher.base_url == BASE_URL

    def test_list_icons_request(self):
        """
        Test the listing request sent to the icon service.
        """
        icons = self.fetcher.list_icons(72, 2, 50, "-iconId")

        assert len(icons) == 3
        self.session.post.assert_called_once_with(
            f"{BASE_URL}/api/project/72/icons",
            json={"params": {"page": 2, "perPage": 50, "sort": "-iconId"}},
            timeout=5
        )

    @pytest.mark.parametrize("payload", [
        {},
        {"result": None},
        {"result": {"icons": None}},
        {"result": {"total": 0}},
        [],
        "unexpected",
    ])
    def test_list_icons_unexpected_shape(self, payload):
        """
        Test that a response without result.icons is treated as zero icons.
        """
        self.session.post.return_value = make_response(payload)

        assert self.fetcher.list_icons(72, 1, 100, "-iconId") == []

    def test_list_icons_failure(self):
        """
        Test that a failing listing request raises FetchError.
        """
        self.session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(FetchError) as excinfo:
            self.fetcher.list_icons(72, 1, 100, "-iconId")

        assert "project 72" in excinfo.value.message
        assert excinfo.value.stage == "fetch"

    def test_image_references(self):
        """
        Test flattening icon records into image references.
        """
        icons = self.listing["result"]["icons"] + [
            {"iconId": 0},
            {"iconId": 5, "iconImages": [{"imageName": "no-path.svg"}, "garbage"]},
            "garbage",
        ]

        assert AssetFetcher.image_references(icons) == [
            ("arrow-left.svg", "images/3/arrow-left.svg"),
            ("arrow-left-bold.svg", "/images/3/arrow-left-bold.svg"),
            ("home.svg", "images/1/home.svg"),
        ]

    def test_fetch_markup(self):
        """
        Test downloading one image.
        """
        assert self.fetcher.fetch_markup("/images/1/home.svg") == "<svg>home</svg>"
        self.session.get.assert_called_once_with(f"{BASE_URL}/images/1/home.svg", timeout=5)

    def test_fetch_all_keeps_listing_order(self):
        """
        Test that assets come back in listing order even when downloads finish out of order.
        """
        delays = {
            f"{BASE_URL}/images/3/arrow-left.svg": 0.2,
            f"{BASE_URL}/images/3/arrow-left-bold.svg": 0.1,
            f"{BASE_URL}/images/1/home.svg": 0.0,
        }

        def slow_get(url, **kwargs):
            time.sleep(delays[url])
            return make_response(text=self.markup[url])

        self.session.get.side_effect = slow_get

        assets = self.fetcher.fetch_all(72, 1, 100, "-iconId")

        assert assets == [
            RawAsset(name="arrow-left.svg", markup="<svg>left</svg>"),
            RawAsset(name="arrow-left-bold.svg", markup="<svg>bold</svg>"),
            RawAsset(name="home.svg", markup="<svg>home</svg>"),
        ]

    def test_fetch_all_no_icons(self):
        """
        Test that an empty listing gives no assets and no downloads.
        """
        self.session.post.return_value = make_response({"result": {"icons": []}})

        assert self.fetcher.fetch_all(72, 1, 100, "-iconId") == []
        self.session.get.assert_not_called()

    def test_fetch_all_icons_without_images(self):
        """
        Test that icons with zero images contribute no assets.
        """
        self.session.post.return_value = make_response({"result": {"icons": [{"iconId": 1, "iconImages": []}]}})

        assert self.fetcher.fetch_all(72, 1, 100, "-iconId") == []

    def test_fetch_all_image_failure(self):
        """
        Test that a failing image download aborts the fetch.
        """
        def failing_get(url, **kwargs):
            if url.endswith("home.svg"):
                raise requests.exceptions.Timeout("slow")
            return make_response(text=self.markup[url])

        self.session.get.side_effect = failing_get

        with pytest.raises(FetchError) as excinfo:
            self.fetcher.fetch_all(72, 1, 100, "-iconId")

        assert "images/1/home.svg" in excinfo.value.message

    def test_fetch_all_http_error(self):
        """
        Test that an HTTP error status on an image raises FetchError.
        """
        response = make_response()
        response.status_code = 404
        response.text = "Not found"
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404", response=response)
        self.session.get.side_effect = None
        self.session.get.return_value = response

        with pytest.raises(FetchError):
            self.fetcher.fetch_all(72, 1, 100, "-iconId")
