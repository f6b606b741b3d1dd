#!/usr/bin/env python3
"""
WasteWise - Main Application
Photo based waste disposal assistant

This script wires all components together:
- Camera interface / image upload
- Remote image-classification model
- Label-to-disposal scoring engine
- In-memory history and CSV/JSON verdict logging

Usage:
    python main.py [--config config.json] [--debug] [--json] classify IMAGE
    python main.py [--config config.json] camera [--source SOURCE]
    python main.py [--config config.json] predictions PREDICTIONS.json
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any

from dotenv import load_dotenv

from wastewise.camera_interface import CameraInterface
from wastewise.models.disposal_classifier import DisposalVerdict, classify
from wastewise.models.prediction_source import DEFAULT_API_URL, PredictionSource
from wastewise.session import SessionState, WasteSession
from wastewise.utils.data_logger import DataLogger
from wastewise.utils.history import ClassificationHistory

TOKEN_ENV_VAR = "HF_API_TOKEN"


class WasteWiseApp:
    """
    Main WasteWise application
    Builds the session and its collaborators from configuration
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the application

        Args:
            config: Configuration dictionary
        """
        self.config = config
        self.setup_logging()

        self.prediction_source = None
        self.data_logger = None
        self.session = None

    def setup_logging(self):
        """Setup logging configuration"""
        log_level = getattr(logging, self.config.get('log_level', 'INFO'))
        log_dir = Path(self.config.get('logging', {}).get('directory', 'logs'))
        log_dir.mkdir(parents=True, exist_ok=True)

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.StreamHandler(),
                logging.FileHandler(log_dir / 'wastewise.log')
            ]
        )

        self.logger = logging.getLogger(__name__)

    def initialize_components(self):
        """Initialize all application components"""
        self.logger.info("Initializing components...")

        source_config = self.config.get('prediction_source', {})
        self.prediction_source = PredictionSource(
            api_token=self.config.get('api_token'),
            api_url=source_config.get('api_url', DEFAULT_API_URL),
            timeout=source_config.get('timeout', 30),
            max_attempts=source_config.get('max_attempts', 3),
            loading_delay_seconds=source_config.get('loading_delay_seconds', 5.0),
            base_delay_seconds=source_config.get('base_delay_seconds', 1.0)
        )

        logging_config = self.config.get('logging', {})
        self.data_logger = DataLogger(
            log_dir=logging_config.get('directory', 'logs'),
            enable_csv=logging_config.get('enable_csv', True),
            enable_json=logging_config.get('enable_json', True)
        )

        camera_config = self.config.get('camera', {})
        history_config = self.config.get('history', {})

        self.session = WasteSession(
            prediction_source=self.prediction_source,
            history=ClassificationHistory(max_items=history_config.get('max_items', 5)),
            data_logger=self.data_logger,
            camera_source=camera_config.get('source', 'auto'),
            camera_factory=lambda: CameraInterface(
                source=camera_config.get('source', 'auto'),
                resolution=camera_config.get('resolution', [640, 480]),
                sample_dir=camera_config.get('sample_dir')
            )
        )

        self.logger.info("All components initialized successfully")

    def classify_file(self, image_path: str) -> Optional[DisposalVerdict]:
        """Upload path: classify an image file"""
        if not self.session.load_image_file(image_path):
            return None
        return self.session.classify()

    def classify_from_camera(self) -> Optional[DisposalVerdict]:
        """Camera path: capture one frame and classify it"""
        if not self.session.start_camera():
            return None
        return self.session.classify()

    def classify_predictions_file(self, predictions_path: str) -> DisposalVerdict:
        """Offline path: classify a saved list of {label, score} predictions"""
        with open(predictions_path, 'r') as f:
            predictions = json.load(f)

        if not isinstance(predictions, list):
            raise ValueError(f"Expected a JSON list of predictions in {predictions_path}")

        verdict = classify(predictions)
        self.data_logger.log_verdict(verdict, source='predictions')
        return verdict

    def get_status(self) -> Dict:
        """Get current application status"""
        if self.session is None:
            return {"status": "not_initialized"}

        return {
            "status": self.session.state.value,
            "error": self.session.error,
            "history": self.session.history.to_dict(),
            "logging": self.data_logger.get_log_statistics()
        }

    def shutdown(self):
        """Release camera and network resources"""
        if self.session:
            self.session.stop_camera()
        if self.prediction_source:
            self.prediction_source.close()


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from file or use defaults"""
    default_config = {
        "prediction_source": {
            "api_url": DEFAULT_API_URL,
            "timeout": 30,
            "max_attempts": 3,
            "loading_delay_seconds": 5.0,
            "base_delay_seconds": 1.0
        },
        "camera": {
            "source": "auto",
            "resolution": [640, 480],
            "sample_dir": None
        },
        "history": {
            "max_items": 5
        },
        "logging": {
            "directory": "logs",
            "enable_csv": True,
            "enable_json": True
        },
        "log_level": "INFO"
    }

    config = default_config
    if config_path and Path(config_path).exists():
        try:
            with open(config_path, 'r') as f:
                user_config = json.load(f)
            config = merge_dicts(default_config, user_config)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Warning: Failed to load config {config_path}: {e}")
            print("Using default configuration")

    # The token lives in the environment (or .env), never in the JSON file
    load_dotenv()
    config['api_token'] = os.getenv(TOKEN_ENV_VAR)

    return config


def merge_dicts(default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge user config over defaults"""
    result = default.copy()
    for key, value in user.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def print_verdict(verdict: DisposalVerdict, as_json: bool = False):
    """Print a verdict for the terminal"""
    if as_json:
        print(json.dumps(verdict.to_dict(), indent=2))
        return

    print(f"{verdict.outcome.value}")
    print(f"  Waste type: {verdict.type}")
    print(f"  Guidance:   {verdict.note}")
    print(f"  Raw label:  {verdict.raw_label}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="WasteWise disposal assistant")
    parser.add_argument('--config', '-c', help='Configuration file path')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--json', action='store_true',
                        help='Print the verdict as JSON')

    subparsers = parser.add_subparsers(dest='command', required=True)

    classify_parser = subparsers.add_parser('classify', help='Classify an image file')
    classify_parser.add_argument('image', help='Path to the image file')

    camera_parser = subparsers.add_parser('camera', help='Capture from camera and classify')
    camera_parser.add_argument('--source', '-s',
                               help="Camera source: auto, usb, simulated, device index or video file")

    predictions_parser = subparsers.add_parser(
        'predictions', help='Classify a saved JSON list of {label, score} predictions')
    predictions_parser.add_argument('file', help='Path to the predictions JSON file')

    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)

    if args.debug:
        config['log_level'] = 'DEBUG'
    if args.command == 'camera' and args.source:
        config['camera']['source'] = int(args.source) if args.source.isdigit() else args.source

    app = WasteWiseApp(config)

    try:
        app.initialize_components()

        if args.command == 'classify':
            verdict = app.classify_file(args.image)
        elif args.command == 'camera':
            verdict = app.classify_from_camera()
        else:
            verdict = app.classify_predictions_file(args.file)

        if verdict is None:
            state = app.session.state
            print(f"Error: {app.session.error}" if state == SessionState.ERROR else "No result")
            return 1

        print_verdict(verdict, as_json=args.json)
        return 0

    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    finally:
        app.shutdown()


if __name__ == "__main__":
    sys.exit(main())
