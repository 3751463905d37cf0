"""DSMLv2 request encoding and decoding."""
