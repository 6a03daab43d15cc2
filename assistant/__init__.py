"""Teaching assistant: teacher profile, feature instructions and chat session."""
