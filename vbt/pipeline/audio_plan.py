from typing import Optional, Sequence
from vbt.config.models import AudioConfig
from vbt.domain.models import AudioStreamPlan, AudioStreamSettings

def select_bitrate(channels: int, tiers: AudioConfig) -> str:
    """Bitrate tier for one stream: mono (or unknown), stereo, or surround."""
    if channels <= 1:
        return tiers.mono_bitrate
    if channels == 2:
        return tiers.stereo_bitrate
    return tiers.surround_bitrate

def build_audio_plan(channels: Sequence[int], codec: Optional[str] = None, tiers: Optional[AudioConfig] = None) -> AudioStreamPlan:
    """One (codec, bitrate) entry per input audio stream, in input stream order."""
    tiers = tiers or AudioConfig()
    codec = codec or tiers.codec
    return AudioStreamPlan(streams=[
        AudioStreamSettings(index=i, codec=codec, bitrate=select_bitrate(ch, tiers), channels=ch)
        for i, ch in enumerate(channels)
    ])
