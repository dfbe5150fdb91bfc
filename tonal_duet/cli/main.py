"""Main entry point for the Tonal Duet CLI."""

import functools
import time
from collections import Counter
from typing import Iterable, List, Optional

import click
import pyfiglet

from ..core.config import ConfigManager
from ..core.exceptions import PitchEngineError
from ..core.factory import ComponentFactory
from ..core.interfaces import IFrameSource
from ..detection.ignore_filter import IgnoreSet
from ..detection.pitch_engine import PitchEngine
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import DetectionResult
from ..services.pitch_detection_service import PitchDetectionService

logger = get_logger(__name__)


def _ignore_set(
    frequencies: Iterable[float], notes: Iterable[str], tolerance: Optional[float], config_manager: ConfigManager
) -> IgnoreSet:
    if tolerance is None:
        tolerance = config_manager.get_config("pitch_engine").get("ignore_tolerance", 10.0)
    entries = [(frequency, tolerance) for frequency in frequencies]
    entries.extend(IgnoreSet.from_notes(notes, tolerance).entries)
    return IgnoreSet.build(entries)


def _echo_pitch(prefix: str, note: str, frequency: float, cents: float, big: bool = False) -> None:
    if big:
        click.echo(pyfiglet.figlet_format(note))
    click.echo(f"{prefix}{note:<4} {frequency:8.2f} Hz  {cents:+6.1f} cents")


def _run_offline(
    engine: PitchEngine, source: IFrameSource, ignore: IgnoreSet, use_flats: bool, big: bool
) -> List[DetectionResult]:
    """Run the engine on the calling thread until the source is exhausted."""
    results: List[DetectionResult] = []

    def on_result(result: DetectionResult) -> None:
        results.append(result)
        _echo_pitch("", result.note.label(use_flats), result.frequency, result.cents, big=big)

    engine.set_ignore_set(ignore)
    engine.start(source, on_result, background=False)
    return results


def _echo_summary(results: List[DetectionResult], use_flats: bool) -> None:
    click.echo(f"Detected {len(results)} pitched frames.")
    counts = Counter(result.note.label(use_flats) for result in results)
    for note_name, count in counts.most_common():
        cents = [r.cents for r in results if r.note.label(use_flats) == note_name]
        click.echo(f"  {note_name}: {count} frames, mean {sum(cents) / len(cents):+.1f} cents")


def ignore_options(func):
    """Options shared by commands that suppress known tones."""
    func = click.option(
        "--tolerance", type=float, default=None, help="Ignore tolerance in Hz (default from config)"
    )(func)
    func = click.option(
        "--ignore-note", "ignore_notes", multiple=True, help="Note to ignore, e.g. C5 (repeatable)"
    )(func)
    func = click.option(
        "--ignore", "ignore_hz", type=float, multiple=True, help="Frequency in Hz to ignore (repeatable)"
    )(func)
    func = click.option("--flats", is_flag=True, help="Use flat notes instead of sharps")(func)
    func = click.option("--big", is_flag=True, help="Render each note in large figlet text")(func)
    return func


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level for Tonal Duet modules",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/tonal_duet)",
)
@click.pass_context
def main(ctx: click.Context, debug: bool, log_level: str, config_dir: Optional[str]) -> None:
    """Tonal Duet - live pitch detection with self-feedback suppression."""
    setup_logging("DEBUG" if debug else log_level)
    ctx.obj = {"config_manager": ConfigManager(config_dir)}


@main.command()
def devices() -> None:
    """List audio input devices."""
    try:
        from ..audio.audio_device import list_input_devices

        found = list_input_devices()
    except OSError as e:
        raise click.ClickException(f"PortAudio is not available: {e}") from e
    except PitchEngineError as e:
        raise click.ClickException(str(e)) from e

    if not found:
        click.echo("No input devices found.")
        return
    for device in found:
        click.echo(
            f"{device['id']:>3}  {device['name']}  "
            f"({device['max_input_channels']} ch, {device['default_samplerate']:.0f} Hz)"
        )


@main.command()
@click.option(
    "--device", "-d", "selectors", multiple=True,
    help="Input device id or name; repeat once per performer",
)
@click.option("--duration", "-t", default=30.0, show_default=True, help="Seconds to listen")
@ignore_options
@click.pass_obj
def listen(obj, selectors, duration, big, flats, ignore_hz, ignore_notes, tolerance) -> None:
    """Detect pitches from one or more live inputs."""
    config_manager = obj["config_manager"]
    selectors = list(selectors) or [None]
    services: List[PitchDetectionService] = []

    try:
        ignore = _ignore_set(ignore_hz, ignore_notes, tolerance, config_manager)
        for index, selector in enumerate(selectors, start=1):
            service = PitchDetectionService(
                device=selector,
                config_manager=config_manager,
                use_flats=flats,
                name=f"player{index}",
            )
            service.set_frequencies_to_ignore(ignore)
            prefix = f"[player {index}] " if len(selectors) > 1 else ""
            service.start(functools.partial(_echo_pitch, prefix, big=big))
            services.append(service)

        click.echo(f"Listening for {duration:.0f} seconds, press Ctrl+C to stop.")
        time.sleep(duration)
    except KeyboardInterrupt:
        click.echo("Interrupted.")
    except OSError as e:
        raise click.ClickException(f"PortAudio is not available: {e}") from e
    except PitchEngineError as e:
        raise click.ClickException(str(e)) from e
    finally:
        for service in services:
            service.stop()


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--frames-per-buffer", "-b", type=int, default=None, help="Samples per frame")
@ignore_options
@click.pass_obj
def analyze(obj, file_path, frames_per_buffer, big, flats, ignore_hz, ignore_notes, tolerance) -> None:
    """Detect pitches in an audio file."""
    config_manager = obj["config_manager"]
    factory = ComponentFactory(config_manager)

    params = {"file_path": file_path}
    if frames_per_buffer:
        params["frames_per_buffer"] = frames_per_buffer

    try:
        ignore = _ignore_set(ignore_hz, ignore_notes, tolerance, config_manager)
        source = factory.create_frame_source("wav", **params)
        results = _run_offline(factory.create_engine(name="analyze"), source, ignore, flats, big)
    except PitchEngineError as e:
        raise click.ClickException(str(e)) from e

    _echo_summary(results, flats)


@main.command()
@click.argument("frequencies", type=float, nargs=-1, required=True)
@click.option("--frames", "-n", default=10, show_default=True, help="Number of frames to synthesize")
@click.option("--amplitude", default=0.5, show_default=True, help="Peak amplitude of the mix")
@ignore_options
@click.pass_obj
def simulate(obj, frequencies, frames, amplitude, big, flats, ignore_hz, ignore_notes, tolerance) -> None:
    """Detect pitches in synthesized tones, e.g. to check an ignore setup."""
    config_manager = obj["config_manager"]
    factory = ComponentFactory(config_manager)

    try:
        ignore = _ignore_set(ignore_hz, ignore_notes, tolerance, config_manager)
        source = factory.create_frame_source(
            "tone", frequencies=list(frequencies), amplitude=amplitude, frame_count=frames
        )
        results = _run_offline(factory.create_engine(name="simulate"), source, ignore, flats, big)
    except PitchEngineError as e:
        raise click.ClickException(str(e)) from e

    _echo_summary(results, flats)


if __name__ == "__main__":
    main()
