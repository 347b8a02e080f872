"""Main application entry point for AudioGraph."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.live import Live

from audiograph import __version__
from audiograph.analysis.analyzer import SignalAnalyzer, self_test_signal
from audiograph.services.graph_service import AudioGraphService
from audiograph.ui.stats_screen import StatsScreen

from .config import AudioGraphConfig

logger = logging.getLogger(__name__)


class Application:

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None):
        # Load configuration
        self.config = AudioGraphConfig(config_path)
        # Set up logging (override config with command line if specified)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.service: Optional[AudioGraphService] = None
        self.screen: Optional[StatsScreen] = None
        self.should_exit = False

    def init(self) -> None:
        logger.info("Initializing services...")
        self.service = AudioGraphService(self.config)
        self.screen = StatsScreen(self.service.display_snapshot)
        self.screen.subscribe()

    def analyze_file(self, path: str) -> bool:
        result = self.service.load_file(path)
        if not result.success:
            self.screen.console.print(f"Failed to load WAV: {result.message}", style="red")
            return False
        self.screen.show(result.snapshot)
        return True

    def run_live(self, duration: Optional[int]) -> bool:
        result = self.service.start_capture()
        if not result.success:
            self.screen.console.print(f"Microphone not available: {result.message}", style="red")
            return False

        try:
            with Live(self.screen.render(), console=self.screen.console,
                      refresh_per_second=10) as live:
                self.screen.attach(live)
                if duration is not None:
                    time.sleep(duration)
                else:
                    while not self.should_exit:
                        time.sleep(1)
        finally:
            self.screen.detach()
            final = self.service.stop_capture()
            self.screen.show(final.snapshot)
        return True

    def cleanup(self) -> None:
        if self.screen:
            self.screen.unsubscribe()
        if self.service:
            self.service.shutdown()


def run_self_test() -> None:
    """Analyze the synthetic sine mix and print the statistics."""
    signal = self_test_signal()
    result = SignalAnalyzer().analyze(signal, len(signal))

    print("AudioGraph self-test results:")
    print(f"Average Amplitude: {result.average_amplitude}")
    print(f"Number of Peaks: {result.peak_count}")
    print(f"Estimated BPM: {result.estimated_bpm}")


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/audiograph.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("AudioGraph starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for AudioGraph."""
    parser = argparse.ArgumentParser(
        description="AudioGraph - waveform, peak and tempo analysis"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--file",
        type=str,
        help="Analyze a 16-bit PCM WAV file (first 5 seconds)"
    )
    source.add_argument(
        "--live",
        action="store_true",
        help="Analyze live microphone input"
    )
    source.add_argument(
        "--self-test",
        action="store_true",
        help="Analyze a synthetic test signal and exit"
    )
    source.add_argument(
        "--list-devices",
        action="store_true",
        help="List capture devices usable as audio.device_index"
    )

    parser.add_argument(
        "--duration",
        type=int,
        help="Seconds of live capture (default: until Ctrl+C)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"AudioGraph v{__version__}"
    )

    args = parser.parse_args()

    if args.self_test:
        run_self_test()
        return

    if args.list_devices:
        from audiograph.audio.device import list_input_devices
        for device in list_input_devices():
            print(f"{device['id']}: {device['name']} ({device['defaultSampleRate']}Hz)")
        return

    app = Application(args.config, args.log_level)
    ok = False
    try:
        app.init()
        if args.file:
            ok = app.analyze_file(args.file)
        else:
            ok = app.run_live(args.duration)
    except KeyboardInterrupt:
        ok = True
    except Exception as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
    finally:
        app.cleanup()

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
