JSON_ONLY_SYSTEM_PROMPT = "Return pure JSON. No prose, no code fences."
