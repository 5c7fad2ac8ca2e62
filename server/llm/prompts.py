# SPDX-License-Identifier: Apache-2.0
"""
Prompt templates for face photo classification.
"""

SYSTEM_PROMPT = """You are an expert in visagism and facial aesthetics. Return only a valid JSON object. No prose, no Markdown, no backticks."""

FACE_PROMPT = """Analyze this face photo. The goal is practical aesthetic improvement ("looksmaxxing").

Return ONLY a JSON object with exactly this structure:
{
  "symmetry": {
    "score": <number from 0 to 10>,
    "analysis": "Short description of eye, eyebrow and jaw symmetry."
  },
  "skin_quality": {
    "score": <number from 0 to 10>,
    "analysis": "Description of texture, acne or visible spots."
  },
  "face_shape": "Oval, Square, Diamond, etc.",
  "strengths": ["strength 1", "strength 2"],
  "suggestions": [
    "Practical tip 1 (e.g. beard or hair style)",
    "Practical tip 2 (e.g. skincare)",
    "Practical tip 3 (e.g. exercises or posture)"
  ]
}"""
