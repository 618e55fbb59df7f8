"""
Guess the Word - Timed word-guessing game engine

One player is shown one word at a time from a shuffled pool and marks it
correct or skipped until a countdown runs out. The engine provides:
- The game-session state machine (word queue, score, countdown)
- One-shot finished/restart events for the screens observing it
- A flow driver that hands the final score to the summary stage
- An HTTP API so a remote client can act as the presentation layer
"""

__version__ = "0.1.0"
