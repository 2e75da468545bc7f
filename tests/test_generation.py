"""Tests for GenerationConfig validation/serialization and SafetySettings."""

from unittest.mock import MagicMock

import httpx
import pytest

from gemini_harness.client import Client
from gemini_harness.errors import InvalidRequestError
from gemini_harness.generation import GenerationConfig, SafetySettings


class TestGenerationConfigValidation:
    @pytest.mark.parametrize("value", [0.0, 0.5, 1.0])
    def test_temperature_accepted(self, value):
        assert GenerationConfig(temperature=value).temperature == value

    @pytest.mark.parametrize("value", [-0.1, 1.1, 2])
    def test_temperature_rejected(self, value):
        with pytest.raises(InvalidRequestError, match="temperature must be between 0.0 and 1.0") as excinfo:
            GenerationConfig(temperature=value)
        assert excinfo.value.status_code is None

    @pytest.mark.parametrize("value", [-0.5, 1.5])
    def test_top_p_rejected(self, value):
        with pytest.raises(InvalidRequestError, match="top_p must be between 0.0 and 1.0"):
            GenerationConfig(top_p=value)

    @pytest.mark.parametrize("value", [0, -5])
    def test_top_k_rejected(self, value):
        with pytest.raises(InvalidRequestError, match="top_k must be greater than 0"):
            GenerationConfig(top_k=value)

    def test_top_k_one_accepted(self):
        GenerationConfig(top_k=1)

    @pytest.mark.parametrize("value", [0, -1])
    def test_max_output_tokens_rejected(self, value):
        with pytest.raises(InvalidRequestError, match="max_output_tokens must be greater than 0"):
            GenerationConfig(max_output_tokens=value)

    @pytest.mark.parametrize("value", [["TEXT"], ["IMAGE"], ["TEXT", "IMAGE"]])
    def test_modalities_accepted(self, value):
        GenerationConfig(response_modalities=value)

    def test_modalities_invalid_value(self):
        with pytest.raises(InvalidRequestError, match="must only contain TEXT or IMAGE"):
            GenerationConfig(response_modalities=["INVALID"])

    def test_modalities_not_a_list(self):
        with pytest.raises(InvalidRequestError, match="must be an array"):
            GenerationConfig(response_modalities="TEXT")  # type: ignore[arg-type]

    def test_modalities_empty(self):
        with pytest.raises(InvalidRequestError, match="must not be empty"):
            GenerationConfig(response_modalities=[])

    @pytest.mark.parametrize("ratio", ["1:1", "16:9", "9:16", "4:3", "3:4", "5:4", "4:5"])
    def test_aspect_ratio_accepted(self, ratio):
        GenerationConfig(aspect_ratio=ratio)

    def test_aspect_ratio_rejected(self):
        with pytest.raises(InvalidRequestError, match="aspect_ratio must be one of"):
            GenerationConfig(aspect_ratio="invalid")

    @pytest.mark.parametrize("size", ["1K", "2K", "4K"])
    def test_image_size_accepted(self, size):
        GenerationConfig(image_size=size)

    @pytest.mark.parametrize("size", ["8K", "2k"])
    def test_image_size_rejected(self, size):
        with pytest.raises(InvalidRequestError, match="image_size must be one of"):
            GenerationConfig(image_size=size)

    def test_invalid_temperature_never_reaches_network(self):
        handler = MagicMock(return_value=httpx.Response(200, json={}))
        client = Client(api_key="test-key", http_transport=httpx.MockTransport(handler))
        with pytest.raises(InvalidRequestError):
            client.generate_content(
                "Hi", generation_config=GenerationConfig(temperature=1.5),
            )
        handler.assert_not_called()


class TestGenerationConfigToDict:
    def test_camel_case(self):
        config = GenerationConfig(temperature=0.5, top_p=0.9, top_k=40, max_output_tokens=1024)
        assert config.to_dict() == {
            "temperature": 0.5, "topP": 0.9, "topK": 40, "maxOutputTokens": 1024,
        }

    def test_omits_unset(self):
        assert GenerationConfig(temperature=0.7).to_dict() == {"temperature": 0.7}
        assert GenerationConfig().to_dict() == {}

    def test_zero_temperature_kept(self):
        assert GenerationConfig(temperature=0.0).to_dict() == {"temperature": 0.0}

    def test_image_parameters(self):
        config = GenerationConfig(
            response_modalities=["TEXT", "IMAGE"],
            aspect_ratio="16:9",
            image_size="2K",
            temperature=0.7,
        )
        assert config.to_dict() == {
            "responseModalities": ["TEXT", "IMAGE"],
            "imageConfig": {"aspectRatio": "16:9", "imageSize": "2K"},
            "temperature": 0.7,
        }

    def test_single_image_field(self):
        assert GenerationConfig(image_size="2K").to_dict() == {"imageConfig": {"imageSize": "2K"}}

    def test_modalities_are_copied(self):
        modalities = ["TEXT"]
        config = GenerationConfig(response_modalities=modalities)
        modalities.append("IMAGE")
        assert config.to_dict() == {"responseModalities": ["TEXT"]}


class TestSafetySettings:
    def test_default(self):
        settings = SafetySettings.default().to_list()
        assert len(settings) == 4
        assert {s["threshold"] for s in settings} == {SafetySettings.BLOCK_MEDIUM_AND_ABOVE}
        assert {s["category"] for s in settings} == {
            "HARM_CATEGORY_HATE_SPEECH",
            "HARM_CATEGORY_DANGEROUS_CONTENT",
            "HARM_CATEGORY_HARASSMENT",
            "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        }

    def test_custom(self):
        settings = SafetySettings([{
            "category": SafetySettings.HARM_CATEGORY_HATE_SPEECH,
            "threshold": SafetySettings.BLOCK_LOW_AND_ABOVE,
        }])
        assert settings.to_list() == [
            {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_LOW_AND_ABOVE"},
        ]

    def test_to_list_is_a_copy(self):
        settings = SafetySettings.default()
        settings.to_list()[0]["threshold"] = "BLOCK_NONE"
        assert settings.to_list()[0]["threshold"] == "BLOCK_MEDIUM_AND_ABOVE"
