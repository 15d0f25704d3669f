from __future__ import annotations

README_PROMPT_LIMIT = 5000


def build_description_prompt(*, description: str) -> str:
    """Build the description-quality rating prompt."""
    return (
        f"Rate the quality of this GitHub repository description: \"{description}\"\n\n"
        "Consider:\n"
        "1. Clarity - Does it clearly explain what the repository is for?\n"
        "2. Completeness - Does it cover the key functionality and purpose?\n"
        "3. Conciseness - Is it appropriately detailed without being verbose?\n\n"
        "Provide:\n"
        "1. A rating of either \"great\", \"good\", \"poor\" (exactly one of these words)\n"
        "2. A brief explanation of why you gave this rating (1-2 sentences)\n\n"
        "Respond in JSON only with fields: {\n"
        "  \"rating\": \"great\" | \"good\" | \"poor\",\n"
        "  \"feedback\": string\n"
        "}\n"
    )


def build_internal_reference_prompt(*, owner: str, repo: str, description: str, readme: str) -> str:
    """Build the internal-reference scan prompt.

    The README is cut to ``README_PROMPT_LIMIT`` characters.
    """
    body = (
        f"You are reviewing the public GitHub repository {owner}/{repo} before open-source release.\n"
        "Look for references that should not be public: internal hostnames or URLs, "
        "intranet links, employee-only tools, internal ticket IDs, credentials, "
        "or text marked confidential.\n\n"
        "Respond in JSON only with fields: {\n"
        "  \"containsInternalRefs\": boolean,\n"
        "  \"issues\": string[]  // one short description per finding, empty if none\n"
        "}\n\n"
        f"--- DESCRIPTION ---\n{description or '(none)'}\n"
    )
    if readme:
        body += "\n--- README ---\n" + readme[:README_PROMPT_LIMIT]
    return body
