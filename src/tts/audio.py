"""
WAV helpers shared by the speech providers and the assembly stage.

Every synthesized chunk is stored as a WAV file with the job's single audio
format (24 kHz, mono, 16-bit PCM by default). Concatenation reads the frames of
each chunk and rewrites one header for the whole stream, so the result is a
single valid WAV file.
"""

import io
import wave
from dataclasses import dataclass
from typing import BinaryIO, Iterable


@dataclass(frozen=True)
class AudioFormat:
    """PCM layout of a WAV stream."""

    sample_rate: int = 24000
    channels: int = 1
    sample_width: int = 2  # bytes per sample

    @property
    def frame_size(self) -> int:
        return self.channels * self.sample_width


def pcm_to_wav(pcm: bytes, audio_format: AudioFormat = AudioFormat()) -> bytes:
    """Wrap raw little-endian PCM frames in a WAV container."""
    if len(pcm) % audio_format.frame_size:
        # Drop a trailing partial frame rather than corrupt the stream
        pcm = pcm[: len(pcm) - len(pcm) % audio_format.frame_size]
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(audio_format.channels)
        wf.setsampwidth(audio_format.sample_width)
        wf.setframerate(audio_format.sample_rate)
        wf.writeframes(pcm)
    return buffer.getvalue()


def read_wav(data: bytes) -> tuple[AudioFormat, bytes]:
    """
    Split a WAV file into its format and its PCM frames.

    Raises:
        ValueError: If ``data`` is not a PCM WAV file
    """
    try:
        with wave.open(io.BytesIO(data), "rb") as wf:
            audio_format = AudioFormat(
                sample_rate=wf.getframerate(),
                channels=wf.getnchannels(),
                sample_width=wf.getsampwidth(),
            )
            frames = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError) as e:
        raise ValueError(f"Invalid WAV data: {e}") from e
    return audio_format, frames


def wav_duration_seconds(data: bytes) -> float:
    """Duration of a WAV file, computed from its frame count."""
    audio_format, frames = read_wav(data)
    return len(frames) / audio_format.frame_size / audio_format.sample_rate


def concatenate_wavs(chunks: Iterable[bytes], output: BinaryIO) -> float:
    """
    Append the frames of every WAV in ``chunks`` to ``output`` as one WAV.

    ``chunks`` is consumed lazily so callers can stream downloads. ``output``
    must be seekable (the header is patched when the writer closes).

    Returns:
        Duration of the assembled stream in seconds

    Raises:
        ValueError: On invalid WAV data, mismatched formats or no chunks
    """
    expected = None
    total_frames = 0
    writer = None
    try:
        for index, data in enumerate(chunks):
            audio_format, frames = read_wav(data)
            if writer is None:
                expected = audio_format
                writer = wave.open(output, "wb")
                writer.setnchannels(audio_format.channels)
                writer.setsampwidth(audio_format.sample_width)
                writer.setframerate(audio_format.sample_rate)
            elif audio_format != expected:
                raise ValueError(
                    f"Chunk {index} format {audio_format} differs from {expected}"
                )
            writer.writeframes(frames)
            total_frames += len(frames) // audio_format.frame_size
    finally:
        if writer is not None:
            writer.close()

    if expected is None:
        raise ValueError("No audio chunks to concatenate")
    return total_frames / expected.sample_rate
