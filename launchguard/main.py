import sys
import signal
import logging
import argparse
from typing import List, Optional

import setproctitle

from launchguard import __version__
from launchguard import device
from launchguard.config import effective_settings as config
from launchguard.display import FramebufferCanvas, StatusDisplay, corner_regions
from launchguard.display.screens import draw_start_screen
from launchguard.input import (
    Button, EvdevDecoder, EvdevInputSource, InputSource, InputState, QuitCapability, TouchTransform, create_trigger,
)
from launchguard.log import resolve_log_level, setup_logging
from launchguard.supervisor import LaunchError, ProcessSupervisor, ShutdownToken, SupervisionLoop, SupervisorError
from launchguard.supervisor.process_utils import launch_process
from launchguard.supervisor.shutdown import resolve_signal

log = logging.getLogger("launchguard")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="launchguard",
        description="Run an application and kill it with a quit gesture or a termination signal.",
    )
    parser.add_argument("-c", "--custom-image", help="Display a custom full image instead of name and icon.")
    parser.add_argument("-i", "--icon", help="Path for icon to display")
    parser.add_argument("--icon-size", type=int, default=config.ICON_SIZE_DEFAULT,
                        help="Size of icon to display (squared)")
    parser.add_argument("-n", "--name", help="App name to display")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", help="Full path to the executable")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the executable")
    return parser


def validate_args(args: argparse.Namespace) -> Optional[str]:
    """
    Validates the parsed arguments.

    :return: An error message, or None if the arguments are valid.
    """
    if not config.ICON_SIZE_MIN <= args.icon_size <= config.ICON_SIZE_MAX:
        return f"Icon size invalid. Must be between {config.ICON_SIZE_MIN} and {config.ICON_SIZE_MAX}!"
    return None


def resolve_app_name(args: argparse.Namespace) -> str:
    if args.name:
        return args.name
    log.warning("No app name was provided. Using command instead.")
    return args.command


def create_input_source(model: device.Model, capability: QuitCapability) -> InputSource:
    """Creates the event source feeding the quit gesture. Falls back to an idle source on failure."""
    transform = TouchTransform(
        config.TOUCH_MAX_X, config.TOUCH_MAX_Y, config.DISPLAY_WIDTH, config.DISPLAY_HEIGHT,
        invert_x=config.TOUCH_INVERT_X, invert_y=config.TOUCH_INVERT_Y,
    )
    source = EvdevInputSource(device.input_device_path(model, capability), EvdevDecoder(transform))
    try:
        source.start()
    except OSError as e:
        log.error(f"Failed to open input device '{source.device_path}': {e}")
        log.error("The quit gesture is unavailable. Use SIGINT or SIGTERM to quit.")
        return InputSource()
    return source


def run(argv: Optional[List[str]] = None) -> int:
    """
    Runs the supervisor with the given command line.

    :param argv: Command line arguments, defaults to sys.argv[1:].
    :return int: The process exit code.
    """
    args = build_parser().parse_args(argv)
    setup_logging(resolve_log_level(args.verbose))

    model = device.detect_model()
    device.check_display_client(model)

    token = ShutdownToken()
    token.install()
    try:
        error = validate_args(args)
        if error:
            log.error(error)
            return 1

        name = resolve_app_name(args)
        setproctitle.setproctitle(f"{config.PROCESS_TITLE_PREFIX} - {name}")

        try:
            graceful_signal = resolve_signal(config.GRACEFUL_SIGNAL)
        except ValueError as e:
            log.warning(f"{e}. Using SIGINT.")
            graceful_signal = signal.SIGINT

        try:
            proc = launch_process(args.command, args.args, name=name, pipe_output=config.PIPE_CHILD_OUTPUT)
        except LaunchError:
            return 1
        supervisor = ProcessSupervisor(proc, config.GRACE_PERIOD_MS / 1000, graceful_signal)

        canvas = None
        source = None
        try:
            capability = device.quit_capability(model, config.QUIT_GESTURE)
            regions = corner_regions(config.DISPLAY_WIDTH, config.DISPLAY_HEIGHT, config.CORNER_SIZE)
            canvas = FramebufferCanvas(
                config.DISPLAY_WIDTH, config.DISPLAY_HEIGHT,
                framebuffer_path=config.FRAMEBUFFER_PATH,
                line_length=config.FRAMEBUFFER_LINE_LENGTH,
                font_path=config.FONT_PATH,
                use_update_ioctl=config.FRAMEBUFFER_UPDATE_IOCTL,
            )
            draw_start_screen(canvas, name, capability, regions,
                              icon_path=args.icon, icon_size=args.icon_size, custom_image=args.custom_image)

            input_state = InputState()
            quit_buttons = tuple(Button[b] for b in config.QUIT_BUTTONS)
            trigger = create_trigger(capability, input_state, regions, quit_buttons)
            source = create_input_source(model, capability)
            status = StatusDisplay(canvas, (None, config.DISPLAY_HEIGHT - config.STATUS_TEXT_OFFSET),
                                   config.STATUS_TEXT_SIZE)

            loop = SupervisionLoop(
                supervisor, trigger, input_state, source, token, status, name,
                cycle_period=config.CYCLE_PERIOD_MS / 1000,
                poll_timeout=config.SELF_EXIT_POLL_MS / 1000,
            )
            reason = loop.run()
            log.info(f"Supervision finished: {reason.describe()}")
            return 0
        except Exception as e:
            log.critical(f"Critical error while supervising: {e}", exc_info=True)
            try:
                supervisor.terminate()
            except SupervisorError as kill_error:
                log.error(f"Could not kill the process after the failure: {kill_error}")
            return 1
        finally:
            if source is not None:
                source.stop()
            if canvas is not None:
                canvas.close()
    finally:
        token.uninstall()


def main() -> None:
    """The main entry point for the console application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
