"""Centralized message/i18n system.

Primary language: RU. Optional EN toggle via config.language ('ru'|'en').
"""

_RU = {
	"PONG": "Pong!",
	"NOT_IN_VOICE": "Not in a voice channel",
	"VOICE_CONNECTED": "Connected to VC",
	"VOICE_CONNECT_FAIL": "Не получилось зайти в голосовой канал",
	"VOICE_LEFT": "Left voice channel",
	"VOICE_LEAVE_FAIL": "Failed: {error}",
	"TRACK_NOT_FOUND": "Не знаю я такого",
	"PLAYING": "Playing song",
	"NO_SESSION_TO_PLAY": "Not in a voice channel to play in",
	"SOURCE_CREATION_ERROR": "Не получилось запустить трек",
}

_EN = {
	"PONG": "Pong!",
	"NOT_IN_VOICE": "Not in a voice channel",
	"VOICE_CONNECTED": "Connected to VC",
	"VOICE_CONNECT_FAIL": "Failed to connect to voice channel",
	"VOICE_LEFT": "Left voice channel",
	"VOICE_LEAVE_FAIL": "Failed: {error}",
	"TRACK_NOT_FOUND": "I don't know that track",
	"PLAYING": "Playing song",
	"NO_SESSION_TO_PLAY": "Not in a voice channel to play in",
	"SOURCE_CREATION_ERROR": "Error creating audio source",
}

_ACTIVE = _RU

def set_language(lang: str):
	global _ACTIVE
	if lang and lang.lower().startswith("en"):
		_ACTIVE = _EN
	else:
		_ACTIVE = _RU

def msg(key: str, **kwargs) -> str:
	text = _ACTIVE.get(key, _RU.get(key, key))
	return text.format(**kwargs) if kwargs else text
