"""GamePad Notes - a play-session journal for your game library."""
