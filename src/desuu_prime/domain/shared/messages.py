"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Item Validation Errors
    NEGATIVE_POSITION = "Position cannot be negative: {position}"

    # Queue Errors
    ITEM_ALREADY_QUEUED = "Item '{title}' ({item_id}) is already queued"

    # Configuration Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    FFMPEG_REQUIRED = "ffmpeg was not found on PATH and is required for audio playback"
    CONTAINER_NOT_FOUND = "Container not found on bot instance"

    # Resolution Errors
    NO_STREAM_URL_FOR_ITEM = "No stream URL found for {title}"
    FILE_NOT_FOUND = "File not found: {path}"
    EMPTY_IDENTIFIER = "Identifier cannot be empty"
    EMPTY_PLAYLIST = "Playlist has no playable entries"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as
    parameters. Records emitted through ``GuildLoggerAdapter`` are already
    prefixed with the guild id, so the core templates leave it out.
    """

    # Queue Operations
    QUEUE_ENQUEUED = "Enqueued '%s' at position %d"
    QUEUE_ENQUEUED_MANY = "Enqueued %d items starting at position %d"
    QUEUE_SHUFFLED = "Shuffled %d queued items"

    # Playback Operations
    PLAYBACK_STARTED = "Started '%s' (takeover=%s)"
    PLAYBACK_START_REFUSED = "Backend refused to start '%s'"
    PLAYBACK_START_RAISED = "Backend raised while starting '%s'"
    PLAYBACK_STOP_RAISED = "Backend raised while stopping playback"
    PLAYBACK_IDLE = "Nothing left to play, going idle"
    PLAYBACK_SKIP = "Skip requested for '%s'"
    PLAYBACK_SKIP_IDLE = "Skip requested while idle, ignoring"
    PLAYBACK_PAUSED = "Paused playback"
    PLAYBACK_RESUMED = "Resumed playback"
    PLAYBACK_RESET = "Session reset (epoch=%d), drained %d items"

    # End Events
    END_EVENT = "Item '%s' ended (%s)"
    END_EVENT_STALE = "Ignoring stale end event for '%s' (%s)"
    END_EVENT_NO_ADVANCE = "End reason %s does not start the next item"

    # Loading
    LOAD_RESOLVED = "Resolved %r as %s"
    LOAD_RESOLVER_RAISED = "Resolver raised for %r"
    LOAD_DROPPED_STALE = "Dropping stale resolution for %r (epoch %d != %d)"
    LOAD_SINK_FAILED = "Outcome sink raised for %r"

    # Interrupts
    INTERRUPT_BUSY = "Interrupt already in progress, ignoring %r"
    INTERRUPT_NOT_CONNECTED = "Backend not connected, ignoring interrupt %r"
    INTERRUPT_CAPTURED = "Interrupt captured '%s' at %d ms"
    INTERRUPT_CAPTURED_IDLE = "Interrupt started while idle"
    INTERRUPT_STALE = "Dropping stale notification resolution for %r"
    INTERRUPT_ABORTED = "Notification %r resolved as %s, aborting interrupt"
    INTERRUPT_NOTIFICATION_STARTED = "Notification '%s' took over playback"
    INTERRUPT_NOTIFICATION_FAILED = "Notification '%s' failed to start, resuming"
    INTERRUPT_RESUMING = "Resuming '%s' at %d ms"
    INTERRUPT_REPAUSED = "Resumed '%s' held paused"
    INTERRUPT_RESUME_DROPPED = "Could not resume '%s' at %d ms, dropping it"
    INTERRUPT_TARGET_CLEARED = "Captured item '%s' ended during interrupt (%s)"
    INTERRUPT_SKIP = "Skip during interrupt marks '%s' as skipped"

    # Session Registry
    SESSION_CREATED = "Created playback session for guild %s"

    # Cache Operations
    CACHE_HIT = "Cache hit for '%s'"
    CACHE_EXPIRED_PRUNED = "Pruned %d expired cache entries"
    CACHE_CLEARED = "Cleared %d cache entries"

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_MOVE_TIMEOUT = "Timeout moving to channel %s"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"
    VOICE_CONNECT_FAILED = "Failed to connect to voice channel %s"
    VOICE_DISCONNECT_FAILED = "Failed to disconnect from voice in guild %s"
    VOICE_MOVE_FAILED = "Failed to move to channel %s"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    BACKEND_PLAYER_ERROR = "Player reported error for '%s' in guild %s: %r"
    BACKEND_LISTENER_MISSING = "No end listener set for guild %s"
    BACKEND_LISTENER_RAISED = "End listener raised for guild %s"

    # Resolution
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_EXTRACT_PLAYLIST = "Failed to extract playlist from %s"
    YTDLP_SKIPPED_ENTRY = "Skipping unplayable playlist entry %s"
    YTDLP_POT_CONFIGURED = "bgutil-ytdlp-pot-provider configured (server=%s)"

    # Slash Commands
    COMMAND_ERROR = "Unhandled error in /%s"
    COMMANDS_SYNCED_GUILD = "Synced %d commands to guild %s"
    COMMANDS_SYNCED_GLOBAL = "Synced %d commands globally"
    COMMANDS_SYNC_FAILED = "Failed to sync commands"
    COG_LOADED = "Loaded extension %s"
    COG_LOAD_FAILED = "Failed to load extension %s"
    NOTIFY_SOUND_MISSING = "Notification sound %s does not exist, notifications disabled"

    # Application Lifecycle
    BOT_STARTING = "Starting desuu-prime in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_READY = "Logged in as %s (id=%s)"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONNECTED_GUILDS = "Connected to %d guild(s)"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.1fs"
    BOT_VOICE_CLOSE_FAILED = "Failed to close voice client in guild %s: %r"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    CONTAINER_SHUTDOWN = "Container shut down, reset %d session(s)"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basicConfig"
    JS_RUNTIME_MISSING = "Neither deno nor node found on PATH; yt-dlp may fail on YouTube"
    AUDIO_CONFIG = "Search prefix %r, format %r, notify on play: %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    """

    # Playback
    NOW_PLAYING = "▶️ Now playing: **{title}**"
    QUEUED_AT = "📝 Queued **{title}** at position {position}"
    PLAYLIST_STARTED = "▶️ Playing **{title}** and queued {count} more from **{playlist}**"
    PLAYLIST_QUEUED = "📝 Queued {count} items from **{playlist}**"
    SKIPPED = "⏭️ Skipped **{title}**"
    PAUSED = "⏸️ Paused."
    RESUMED = "▶️ Resumed."
    SHUFFLED = "🔀 Shuffled {count} queued items."
    JOINED = "👋 Joined **{channel}**."
    LEFT = "👋 Left the voice channel and cleared {count} queued items."

    # Views
    QUEUE_TITLE = "Queue"
    QUEUE_EMPTY = "The queue is empty."
    QUEUE_MORE = "…and {count} more"
    NOW_PLAYING_TITLE = "Now Playing"
    NOTHING_PLAYING = "Nothing is playing."

    # Errors
    ERROR_NO_MATCHES = "❌ Couldn't find anything for: {query}"
    ERROR_LOAD_FAILED = "❌ Failed to load {query}: {reason}"
    ERROR_START_FAILED = "❌ Could not start playback of **{title}**"
    ERROR_NOTHING_TO_SKIP = "Nothing to skip."
    ERROR_NOT_IN_VOICE = "❌ Join a voice channel first."
    ERROR_NOT_SAME_CHANNEL = "❌ You must be in my voice channel."
    ERROR_BOT_NOT_CONNECTED = "I'm not connected to a voice channel."
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_GUILD_ONLY = "❌ This command only works in a server."
    ERROR_COMMAND_FAILED = "❌ Command failed. See logs."
    ERROR_COMMAND_COOLDOWN = "⏳ Command on cooldown. Try again in {seconds:.1f}s."
    ERROR_MISSING_PERMISSIONS = "❌ You don't have permission to use this command."

    # Status
    STATE_DROPPED = "The request was cancelled because the player was reset."
