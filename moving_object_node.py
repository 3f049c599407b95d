#!/usr/bin/env python3
# moving_object_node.py

import argparse
import logging
import os
import sys

from moving_object.config import FusionConfig, load_config
from moving_object.errors import ConfigError
from moving_object.sinks import JsonlSink, LoggingSink
from moving_object.utils.visualization import MovingObjectVisualizer
from pipeline.data_sources import JsonlBatchSource
from pipeline.dispatcher import Dispatcher

logger = logging.getLogger("moving_object")

DEFAULT_CONFIG = "config/moving_object.yaml"


def configure_logging(level: str = "INFO"):
    """Configure root logging the same way for every run."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler()],
        force=True
    )


def parse_canvas(value: str):
    """Parse a WIDTHxHEIGHT canvas size."""
    try:
        width, height = (int(v) for v in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Canvas must look like 640x480, got {value!r}")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Canvas dimensions must be positive, got {value!r}")
    return width, height


def create_sinks(output_dir=None):
    """Create the moving-object and social-object sinks."""
    if output_dir:
        moving_sink = JsonlSink(os.path.join(output_dir, "moving_objects.jsonl"), name="moving_objects")
        social_sink = JsonlSink(os.path.join(output_dir, "social_objects.jsonl"), name="social_objects")
    else:
        moving_sink = LoggingSink("moving_objects")
        social_sink = LoggingSink("social_objects")
    return moving_sink, social_sink


def create_renderer(config: FusionConfig, render_dir: str, canvas_size):
    """Return an on_published callback that writes one overlay image per frame."""
    os.makedirs(render_dir, exist_ok=True)
    visualizer = MovingObjectVisualizer()
    width, height = canvas_size

    def render(frame):
        canvas = visualizer.create_canvas(width, height)
        vis = visualizer.visualize(
            canvas,
            frame.get_moving_objects(),
            key=frame.key,
            social_labels=config.social_filter
        )
        name = f"{frame.get_frame_id().replace('/', '_')}_{frame.get_stamp():.6f}.png"
        visualizer.save(os.path.join(render_dir, name), vis)

    return render


def main(argv=None):
    """Main function."""

    parser = argparse.ArgumentParser(description="Moving object fusion node")
    parser.add_argument("--config", type=str, default=DEFAULT_CONFIG,
                        help="Path to configuration file")
    parser.add_argument("--input", type=str, default="-",
                        help="JSON Lines observation recording ('-' for stdin)")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Directory for moving/social JSON Lines output (logs only if omitted)")
    parser.add_argument("--render-dir", type=str, default=None,
                        help="Directory for per-frame overlay images")
    parser.add_argument("--canvas", type=parse_canvas, default=(640, 480),
                        help="Overlay canvas size as WIDTHxHEIGHT")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Override the configured log level")

    args = parser.parse_args(argv)

    configure_logging(args.log_level or "INFO")

    # Load configuration
    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    configure_logging(args.log_level or config.log_level)
    logger.info("ENTER moving_object node")

    moving_sink, social_sink = create_sinks(args.output_dir)
    on_published = None
    if args.render_dir:
        on_published = create_renderer(config, args.render_dir, args.canvas)

    dispatcher = Dispatcher(
        config,
        moving_sink=moving_sink,
        social_sink=social_sink,
        on_published=on_published
    )
    source = JsonlBatchSource(args.input, stats=dispatcher.stats)

    try:
        with source, moving_sink, social_sink:
            dispatcher.run(source)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        dispatcher.stop()
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Statistics: {dispatcher.report_stats()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
