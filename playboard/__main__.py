"""Entry point for playboard package."""

import argparse

from playboard.config import get_config, configure_logging


def run_demo(coverage: str, times: list[float]) -> None:
    """Build a sample play and print where everyone is at each time."""
    from playboard.board import Board
    from playboard.history import ImmediateScheduler

    board = Board(scheduler=ImmediateScheduler())
    board.add_player("qb")
    board.add_player("blue")
    board.add_route_from_template("slant")
    board.add_route_from_template("hitch")
    board.add_route_from_template("corner")
    board.create_defense()
    board.set_coverage(None if coverage == "pursuit" else coverage)

    print("Playboard - Play Animation (Demo Mode)")
    print("=" * 50)
    print(f"Offense: {len(board.offense)}  Defense: {len(board.defense)}  Routes: {len(board.routes)}")
    print(f"Coverage: {coverage}")
    print()

    for t in times:
        frame = board.preview_frame(t)
        print(f"t={t:.2f}s  progress={frame.progress:.2f}{'  (complete)' if frame.complete else ''}")
        for player in board.players:
            pos = frame.positions[player.id]
            print(f"  {player.team.value:<8} {player.color:<8} ({pos.x:7.1f}, {pos.y:7.1f})")
        print()


def main() -> None:
    """Main entry point for the Playboard application."""
    parser = argparse.ArgumentParser(
        description="Playboard - play diagram editor and animator",
        prog="playboard",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP/WebSocket API")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    demo = subparsers.add_parser("demo", help="Animate a sample play and print positions")
    demo.add_argument(
        "--coverage",
        type=str,
        default="cover-2",
        choices=["cover-2", "cover-3", "cover-4", "man-coverage", "pursuit"],
        help="Defensive coverage (default: cover-2)",
    )
    demo.add_argument(
        "--times",
        type=float,
        nargs="+",
        default=[0.0, 0.5, 1.0, 2.0],
        help="Seconds into playback to print",
    )

    args = parser.parse_args()

    config = get_config()
    errors = config.validate()
    if errors:
        parser.error("; ".join(errors))
    configure_logging(config)

    if args.command == "serve":
        from playboard.api.main import run_api

        run_api(host=args.host, port=args.port, reload=args.reload)
    else:
        run_demo(args.coverage, args.times)


if __name__ == "__main__":
    main()
