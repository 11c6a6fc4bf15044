"""
SQL schema for the shared rate-limit table.
Only needed when RATE_LIMIT_BACKEND=supabase.
Run these queries in your Supabase SQL editor.
"""

CREATE_RATE_LIMIT_WINDOWS_TABLE = """
-- One row per limiter/client key, e.g. 'analysis:203.0.113.7'
CREATE TABLE IF NOT EXISTS rate_limit_windows (
    client_key VARCHAR(255) PRIMARY KEY,
    count INTEGER NOT NULL DEFAULT 0 CHECK (count >= 0),
    -- Epoch milliseconds at which the current window expires
    window_reset_at BIGINT NOT NULL,
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

-- Create index for expired-window cleanup
CREATE INDEX IF NOT EXISTS idx_rate_limit_windows_reset
    ON rate_limit_windows(window_reset_at);

-- Enable Row Level Security
ALTER TABLE rate_limit_windows ENABLE ROW LEVEL SECURITY;

-- Policy: Service role can do everything (for API)
CREATE POLICY rate_limit_windows_service_role_all ON rate_limit_windows
    FOR ALL
    USING (auth.role() = 'service_role');
"""

CLEANUP_EXPIRED_WINDOWS = """
-- Remove windows that expired more than a day ago
DELETE FROM rate_limit_windows
WHERE window_reset_at < (EXTRACT(EPOCH FROM NOW()) * 1000)::BIGINT - 86400000;
"""


# Combined setup script
FULL_SCHEMA_SETUP = f"""
-- =====================================================
-- Self-Care Guide Rate Limit Schema Setup
-- =====================================================
-- Run this in your Supabase SQL Editor
-- =====================================================

{CREATE_RATE_LIMIT_WINDOWS_TABLE}

{CLEANUP_EXPIRED_WINDOWS}

-- =====================================================
-- Setup Complete!
-- =====================================================
"""

if __name__ == "__main__":
    print(FULL_SCHEMA_SETUP)
