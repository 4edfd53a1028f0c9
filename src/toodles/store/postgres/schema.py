"""PostgreSQL schema definitions."""

from typing import Final

CREATE_CHAT_MESSAGES_TABLE: Final[str] = """
CREATE TABLE IF NOT EXISTS chat_messages (
    id BIGSERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    timestamp TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_CHAT_MESSAGES_USER_INDEX: Final[str] = """
CREATE INDEX IF NOT EXISTS idx_chat_messages_user
ON chat_messages (user_id, timestamp, id);
"""

# One system message per user
CREATE_CHAT_MESSAGES_SYSTEM_INDEX: Final[str] = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_chat_messages_system
ON chat_messages (user_id)
WHERE role = 'system';
"""

CREATE_USER_INTERACTION_TABLE: Final[str] = """
CREATE TABLE IF NOT EXISTS user_interaction (
    user_id TEXT PRIMARY KEY,
    num_positive INTEGER NOT NULL DEFAULT 0 CHECK (num_positive >= 0),
    num_negative INTEGER NOT NULL DEFAULT 0 CHECK (num_negative >= 0),
    num_neutral INTEGER NOT NULL DEFAULT 0 CHECK (num_neutral >= 0),
    last_interaction TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

SELECT_CHAT_HISTORY: Final[str] = """
SELECT role, content
FROM chat_messages
WHERE user_id = $1
ORDER BY (role = 'system') DESC, timestamp ASC, id ASC
"""

INSERT_CHAT_MESSAGE: Final[str] = """
INSERT INTO chat_messages (user_id, role, content)
VALUES ($1, $2, $3)
"""

UPSERT_SYSTEM_MESSAGE: Final[str] = """
INSERT INTO chat_messages (user_id, role, content)
VALUES ($1, 'system', $2)
ON CONFLICT (user_id) WHERE role = 'system'
DO UPDATE SET
    content = EXCLUDED.content,
    timestamp = CURRENT_TIMESTAMP
"""

DELETE_CHAT_HISTORY: Final[str] = """
DELETE FROM chat_messages WHERE user_id = $1
"""

SELECT_USER_INTERACTION: Final[str] = """
SELECT num_positive, num_negative, num_neutral
FROM user_interaction
WHERE user_id = $1
"""

# {column} is one of the counter columns; the new row starts that counter at 1.
INCREMENT_COUNTER: Final[str] = """
INSERT INTO user_interaction (user_id, num_positive, num_negative, num_neutral)
VALUES ($1, {positive}, {negative}, {neutral})
ON CONFLICT (user_id)
DO UPDATE SET
    {column} = user_interaction.{column} + 1,
    last_interaction = CURRENT_TIMESTAMP
"""

RESET_USER_INTERACTION: Final[str] = """
UPDATE user_interaction
SET num_positive = 0,
    num_negative = 0,
    num_neutral = 0,
    last_interaction = CURRENT_TIMESTAMP
WHERE user_id = $1
"""

DROP_TABLES: Final[str] = """
DROP TABLE IF EXISTS chat_messages CASCADE;
DROP TABLE IF EXISTS user_interaction CASCADE;
"""
