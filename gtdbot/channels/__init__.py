"""Channels - the boundary between a chat platform and the GTD engine

Platform adapters parse a message into (user_id, command, argv) and hand it
to the dispatcher; the dispatcher returns a structured outcome for the
adapter to render.
"""

from gtdbot.channels.dispatcher import OUTCOME_KINDS, CommandDispatcher, build_dispatcher

__all__ = ["CommandDispatcher", "OUTCOME_KINDS", "build_dispatcher"]
