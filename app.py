import asyncio
import json
import sys
import uuid

from podium import Config, setup_logging, InterviewSessionController, SubmissionCoordinator
from podium.errors import PodiumError
from podium.models import SetupMetadata
from podium.services import ReviewRepository, create_backend

logger = setup_logging()

HELP_TEXT = """Commands:
  <path to video>   use the file as the answer to the current question
  next | prev       move between unlocked questions
  goto N            jump to question N
  reset             delete the answer to the current question
  submit            send all answers for review (last question must be answered)
  exit              leave the interview"""


def _print_snapshot(snapshot):
    total = len(snapshot.questions)
    marks = []
    for index in range(total):
        label = str(index + 1)
        if index in snapshot.answered:
            label += "*"
        if index == snapshot.current_index:
            label = f"[{label}]"
        elif index > snapshot.max_unlocked_index:
            label = f"({label})"
        marks.append(label)
    print("\n" + " ".join(marks))
    print(f"Question {snapshot.current_index + 1}/{total}: {snapshot.current_question}")
    if snapshot.current_index in snapshot.answered:
        print(f"Answer attached ({snapshot.previews.get(snapshot.current_index)})")
    if snapshot.can_complete:
        print("All set - type 'submit' when you are ready.")


def _confirm_exit() -> bool:
    answer = input("Discard your answers and leave the interview? [y/N] ").strip().lower()
    return answer in ("y", "yes")


async def run_interactive_mode():
    """Run a mock interview in the terminal."""
    print("Podium Mock Interview\n")

    company = input("Company: ").strip()
    position = input("Position: ").strip()
    experience = input("Experience level: ").strip()
    count = input("Number of questions [5]: ").strip() or 5

    if not (company and position and experience):
        print("Company, position and experience level are required")
        return

    setup = SetupMetadata(company, position, experience, count)
    user_id = str(uuid.uuid4())[:8]

    backend = create_backend()
    repository = ReviewRepository() if Config.PERSIST_REVIEWS else None
    coordinator = SubmissionCoordinator(backend, summary_service=backend, repository=repository)
    controller = InterviewSessionController(coordinator, question_service=backend, user_id=user_id)

    try:
        print("\nGenerating questions...")
        await controller.start_from_setup(setup)
        print(HELP_TEXT)

        while controller.is_active:
            _print_snapshot(controller.snapshot())
            user_input = input("\n> ").strip()
            command = user_input.lower()

            try:
                if command in ("exit", "quit"):
                    if await controller.exit(_confirm_exit):
                        print("Interview discarded.")
                        return
                elif command == "next":
                    if not controller.advance():
                        print("Answer this question to unlock the next one.")
                elif command == "prev":
                    controller.retreat()
                elif command.startswith("goto"):
                    controller.jump_to(int(command.split()[1]) - 1)
                elif command == "reset":
                    controller.reset_current()
                elif command == "submit":
                    print("\nAnalysing your answers...")
                    report = await controller.complete()
                    print("\nINTERVIEW REPORT:")
                    print(json.dumps(report.to_dict(), indent=2))
                    if repository:
                        print(f"\nResults saved for user {user_id}")
                elif command in ("help", "?"):
                    print(HELP_TEXT)
                elif user_input:
                    controller.upload_file(user_input)
            except PodiumError as e:
                print(f"Error: {e}")
            except (IndexError, ValueError):
                print("Usage: goto N")

    except Exception as e:
        logger.error(f"Application error: {e}")
        print(f"Error: {e}")
    finally:
        if controller.is_active:
            await controller.exit(lambda: True)


def show_history(user_id: str):
    """Print the persisted reviews and summary for a user."""
    repository = ReviewRepository()
    history = {
        "user_id": user_id,
        "reviews": repository.load_reviews(user_id),
        "summary": repository.load_summary(user_id),
    }
    print(json.dumps(history, indent=2, default=str))


async def main():
    """Main application entry point."""
    if len(sys.argv) > 2 and sys.argv[1] == "--history":
        show_history(sys.argv[2])
        return

    # Validate API keys first
    try:
        Config.validate_api_keys()
    except ValueError as e:
        logger.error(f"API key validation failed: {e}")
        print(f"Error: {e}")
        return

    await run_interactive_mode()


def cli():
    asyncio.run(main())


if __name__ == "__main__":
    cli()
