"""What each view shows: title, description, buttons and the preview image.

Buttons are 1-indexed in the order given here and map directly onto the
``button_index`` the engine receives on the next post.
"""

from typing import List, NamedTuple, Tuple
from urllib.parse import quote

from .codec import encode_state
from .state import GameState, View

GAME_TITLE = 'Two Truths and a Lie'
DEFAULT_DESCRIPTION = 'A fun game to play with friends!'
CREATE_INSTRUCTIONS = 'Enter 2 truths and 1 lie separated by | (pipe character)'
CREATE_EXAMPLE = "Example: I can speak 3 languages|I've been to Japan|I have a pet tiger"
INPUT_PLACEHOLDER = 'Enter your statements'
EMPTY_SLOT = '(no statement)'
MAX_BUTTONS = 4


class FramePrompt(NamedTuple):
    title: str
    description: str
    buttons: List[str]
    accepts_text: bool
    input_placeholder: str
    image_url: str
    post_url: str
    state_token: str
    leaderboard: List[str]


def image_url(host: str, token: str) -> str:
    return f"{host}/api/frames/image?state={quote(token, safe='')}"


def leaderboard_rows(users) -> List[str]:
    return [f"{rank}. {u.username}: {u.total_points} points" for rank, u in enumerate(users, start=1)]


def present(state: GameState, store, host: str, leaderboard_size: int = 10) -> FramePrompt:
    token = encode_state(state)
    title = GAME_TITLE
    description = DEFAULT_DESCRIPTION
    buttons: List[str] = []
    accepts_text = False
    rows: List[str] = []
    view = state.current_view

    if view == View.WELCOME:
        description = 'Play the classic game of Two Truths and a Lie with your Farcaster friends!'
        buttons = ['Sign in with Farcaster']

    elif view == View.AUTH:
        description = 'Authenticating with Farcaster...'
        buttons = ['Continue']

    elif view == View.CREATE:
        title = 'Create Your Statements'
        description = f"{CREATE_INSTRUCTIONS}.\n{CREATE_EXAMPLE}"
        buttons = ['Submit', 'Skip to Play', 'View Leaderboard']
        accepts_text = True

    elif view == View.PLAY:
        if not state.statements:
            description = 'Loading statements...'
            buttons = ['Find an Opponent']
        else:
            title = 'Which one is the lie?'
            description = 'Select the statement you think is a lie:'
            # Guess slots stay at 1-3 so the leaderboard is always button 4
            slots = [s.text for s in state.statements[:3]]
            slots += [EMPTY_SLOT] * (3 - len(slots))
            buttons = slots + ['View Leaderboard']

    elif view == View.RESULT:
        guess = state.last_guess
        if guess is None:
            description = 'Something went wrong...'
            buttons = ['Play Again']
        else:
            if guess.is_correct:
                total = state.user.total_points if state.user else 0
                title = 'Correct! 🎉'
                description = f"You earned {guess.points_earned} points! Your total: {total}"
            else:
                title = 'Wrong! 😢'
                description = 'Better luck next time!'
            buttons = ['Play Again', 'Create New Statements', 'View Leaderboard']

    elif view == View.LEADERBOARD:
        title = 'Leaderboard'
        rows = leaderboard_rows(store.top_users(leaderboard_size))
        if rows:
            description = 'Top players:\n' + '\n'.join(rows)
        else:
            description = 'No players yet. Be the first!'
        buttons = ['Play', 'Create New Statements']

    return FramePrompt(
        title=title,
        description=description,
        buttons=buttons[:MAX_BUTTONS],
        accepts_text=accepts_text,
        input_placeholder=INPUT_PLACEHOLDER if accepts_text else '',
        image_url=image_url(host, token),
        post_url=f"{host}/api/frames",
        state_token=token,
        leaderboard=rows,
    )


def image_lines(state: GameState) -> Tuple[str, List[str]]:
    """Heading and text lines drawn on the preview card for ``state``."""
    view = state.current_view
    if view == View.AUTH:
        return GAME_TITLE, ['Authenticating with Farcaster...']
    if view == View.CREATE:
        return 'Create Your Statements', [CREATE_INSTRUCTIONS, CREATE_EXAMPLE]
    if view == View.PLAY:
        if not state.statements:
            return 'Which one is the lie?', ['Loading statements...']
        return 'Which one is the lie?', [f"{i}. {s.text}" for i, s in enumerate(state.statements, start=1)]
    if view == View.RESULT:
        guess = state.last_guess
        if guess is None:
            return GAME_TITLE, ['Something went wrong...']
        if not guess.is_correct:
            return 'Wrong! 😢', ['Better luck next time!']
        lines = [f"You earned {guess.points_earned} points!"]
        if state.user is not None:
            lines.append(f"Your total: {state.user.total_points} points")
        return 'Correct! 🎉', lines
    if view == View.LEADERBOARD:
        return 'Leaderboard', []
    return GAME_TITLE, [
        'Play the classic game with your Farcaster friends!',
        'Sign in with Farcaster to get started',
    ]
