import logging

import pytest

import barbeat.config
import barbeat.errors


def test_options_validate_on_construction () -> None:

	with pytest.raises(barbeat.errors.TimeSignatureError):
		barbeat.config.NotationOptions(time_sig_numerator=6)


def test_beats_per_bar_resolved () -> None:

	assert barbeat.config.NotationOptions().beats_per_bar_resolved == 4
	assert barbeat.config.NotationOptions(beats_per_bar=3).beats_per_bar_resolved == 3
	assert barbeat.config.NotationOptions(beats_per_bar=3, time_sig_numerator=6, time_sig_denominator=8).beats_per_bar_resolved == 6


def test_time_signature_kwargs_leave_out_drum_mode () -> None:

	options = barbeat.config.NotationOptions(time_sig_numerator=6, time_sig_denominator=8, drum_mode=True)

	assert options.time_signature_kwargs() == {
		"beats_per_bar": None,
		"time_sig_numerator": 6,
		"time_sig_denominator": 8,
	}


def test_parse_time_signature () -> None:

	assert barbeat.config.parse_time_signature("4/4") == (4, 4)
	assert barbeat.config.parse_time_signature(" 6 / 8 ") == (6, 8)


def test_parse_time_signature_errors () -> None:

	for text in ("6", "6/", "a/b", "0/4", "4/0", "6:8"):
		with pytest.raises(barbeat.errors.TimeSignatureError):
			barbeat.config.parse_time_signature(text)


def test_missing_config_warns (tmp_path, caplog) -> None:

	with caplog.at_level(logging.WARNING, logger="barbeat.config"):
		config = barbeat.config.load_config(str(tmp_path / "missing.yaml"))

	assert config == {}
	assert "not found" in caplog.text


def test_load_config_from_yaml (tmp_path) -> None:

	path = tmp_path / "config.yaml"
	path.write_text("notation:\n  time_signature: 6/8\n  drum_mode: true\n")

	options = barbeat.config.options_from_config(barbeat.config.load_config(str(path)))

	assert options.time_sig_numerator == 6
	assert options.time_sig_denominator == 8
	assert options.drum_mode is True


def test_separate_numerator_and_denominator (tmp_path) -> None:

	path = tmp_path / "config.yaml"
	path.write_text("notation:\n  numerator: 3\n  denominator: 4\n")

	options = barbeat.config.options_from_config(barbeat.config.load_config(str(path)))

	assert (options.time_sig_numerator, options.time_sig_denominator) == (3, 4)
	assert options.drum_mode is False


def test_empty_config_file (tmp_path) -> None:

	path = tmp_path / "config.yaml"
	path.write_text("")

	assert barbeat.config.load_config(str(path)) == {}
	assert barbeat.config.options_from_config({}) == barbeat.config.NotationOptions()


def test_half_time_signature_in_config () -> None:

	with pytest.raises(barbeat.errors.TimeSignatureError):
		barbeat.config.options_from_config({"notation": {"numerator": 3}})
