"""Command line entrypoint for connectevo."""
import argparse

from . import __version__


def play_console(agent, difficulty, human_first: bool = True) -> int:
    """Human vs agent in the terminal; a debugging aid, not a renderer."""
    from .engine import Board, Player

    board = Board()
    human = Player.ONE if human_first else Player.TWO
    turn = Player.ONE
    while True:
        if turn is human:
            print(board.render())
            raw = input(f"Your move (0-6, q to quit) [{'X' if human is Player.ONE else 'O'}]: ")
            if raw.strip().lower() == "q":
                return 0
            try:
                col = int(raw)
            except ValueError:
                print("Enter a column number.")
                continue
            if not board.is_valid_move(col):
                print(f"Column {col} is not playable.")
                continue
        else:
            col = agent.select_move(board, int(difficulty), turn)
            print(f"Agent plays column {col}")
        board.drop(col, turn)
        if board.check_win(turn):
            print(board.render())
            print("You win!" if turn is human else "Agent wins.")
            return 0
        if board.is_full():
            print(board.render())
            print("Draw.")
            return 0
        turn = turn.opponent()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="connectevo")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--serve", action="store_true", help="Run FastAPI server")
    parser.add_argument("--host", default="127.0.0.1", help="Server host")
    parser.add_argument("--port", type=int, default=8000, help="Server port")
    parser.add_argument(
        "--train",
        action="store_true",
        help="Evolve a population through self-play and report champions.",
    )
    parser.add_argument(
        "--batches",
        type=int,
        default=None,
        help="Number of training batches (default: 5, or CONNECTEVO_BATCHES).",
    )
    parser.add_argument(
        "--generations",
        type=int,
        default=None,
        help="Generations per batch (default: 10, or CONNECTEVO_GENERATIONS).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible training (default: CONNECTEVO_SEED).",
    )
    parser.add_argument(
        "--play",
        action="store_true",
        help="Play against the trained champion (or --genome) in the terminal.",
    )
    parser.add_argument(
        "--genome",
        default="",
        help="Comma-separated genome for --play, e.g. 1,1,1,1. Skips training.",
    )
    parser.add_argument(
        "--difficulty",
        default="medium",
        help="easy, medium, hard or impossible (search depth 2/4/7/8).",
    )
    parser.add_argument(
        "--agent-first",
        action="store_true",
        help="Let the agent make the first move in --play.",
    )
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if args.serve:
        try:
            from uvicorn import run
            from connectevo.api import create_app
        except ImportError:
            print("uvicorn and fastapi are required to serve the API. Install with: pip install 'connectevo[api]'")
            return 1

        run(create_app(), host=args.host, port=args.port, reload=False)
        return 0

    from .ai.agent import Agent, Difficulty, parse_genome
    from .ai.train import TrainingConfig, train

    try:
        difficulty = Difficulty.parse(args.difficulty)
        genome = parse_genome(args.genome)
        config = TrainingConfig.from_env()
        if args.seed is not None:
            config.seed = args.seed
        if args.batches is not None:
            config.total_batches = args.batches
        if args.generations is not None:
            config.generations_per_batch = args.generations
        config.validate()
    except ValueError as exc:
        print(f"error: {exc}")
        return 2

    agent = Agent(genome) if genome is not None else None
    if args.train or (args.play and agent is None):
        context = train(config)
        agent = context.best_agent

    if args.play:
        return play_console(agent, difficulty, human_first=not args.agent_first)

    if not args.train:
        parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
