"""Prompt templates and the fallback document.

Every function here is pure: the same inputs always render the same text.
"""

from typing import Optional, Sequence

from ..schemas.repository import FetchedFile, RepositoryMetadata, RepositoryRef

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Files embedded in the repository prompt. Later files are dropped to keep
# the prompt inside the model's context window.
MAX_PROMPT_FILES: int = 10

# Characters of generated content shown to the title prompt.
TITLE_CONTEXT_CHARS: int = 2000

DEPTH_MODIFIERS: dict[str, str] = {
    "basic": "brief and concise",
    "detailed": "detailed and thorough",
    "comprehensive": "extremely detailed with comprehensive examples",
}
DEFAULT_DEPTH_MODIFIER: str = DEPTH_MODIFIERS["detailed"]


def depth_modifier(depth: Optional[str]) -> str:
    """Wording for a depth setting. Unknown or missing depth reads as detailed."""
    return DEPTH_MODIFIERS.get(depth or "", DEFAULT_DEPTH_MODIFIER)


def requested_sections(
    include_readme: bool = True,
    include_installation: bool = True,
    include_api: bool = True,
    include_examples: bool = True,
    include_contributing: bool = False,
) -> list[str]:
    sections = []
    if include_readme:
        sections.append("A project overview and README")
    if include_installation:
        sections.append("Installation instructions")
    if include_api:
        sections.append("API documentation/core features")
    if include_examples:
        sections.append("Usage and code examples")
    if include_contributing:
        sections.append("Contributing guidelines")
    return sections


def _render_file(file: FetchedFile) -> str:
    return f"\n--- File: {file.path} ---\n```{file.extension}\n{file.content}\n```"


def build_repository_prompt(
    ref: RepositoryRef,
    metadata: RepositoryMetadata,
    tree: Sequence[str],
    files: Sequence[FetchedFile],
    depth: Optional[str],
    sections: Sequence[str],
) -> str:
    """Render the repository documentation prompt.

    Only the first MAX_PROMPT_FILES of *files* are embedded, in the order
    given. An empty *files* list still yields a complete prompt.
    """
    modifier = depth_modifier(depth)
    file_contents = "\n".join(_render_file(f) for f in list(files)[:MAX_PROMPT_FILES])
    tree_text = "\n".join(tree)

    return f"""You are an expert technical writer. Your task is to generate high-quality, {modifier} documentation for a GitHub repository based on the context provided below.

**Repository Information:**
- Full Name: {ref.full_name}
- Description: {metadata.description or "Not provided."}
- Primary Language: {metadata.language or "Not specified."}
- Stars: {metadata.stars or 0}
- Forks: {metadata.forks or 0}
- License: {metadata.license_name or "Not specified."}

**File & Directory Structure:**
This is a summary of the repository's file structure:
```
{tree_text}
```

**Key File Contents:**
I have retrieved the content of the following key files for your analysis:
{file_contents}

**YOUR TASK:**
Generate {modifier} documentation for this repository. The user has requested the following sections: {", ".join(sections)}.

**INSTRUCTIONS:**
1.  **Analyze the context:** Thoroughly examine the file structure and the contents of the key files to understand the project's purpose, technologies, dependencies, and architecture.
2.  **Installation Guide:** Use files like `package.json` or `requirements.txt` to provide accurate installation steps. Mention the exact commands to run (e.g., `npm install`).
3.  **Core Features:** Based on the code, README, and description, explain what the project does and its main features.
4.  **Usage Examples:** Create clear, practical code examples. If you see functions or components in the provided source code, show how to use them.
5.  **Structure and Formatting:** Format the output as clean, well-structured Markdown. Use headings, lists, and code blocks effectively. Start with relevant shields.io badges for license, language, etc., if information is available.
6.  **Fact-Based:** Base your documentation strictly on the provided context. Do not invent information. If a piece of information (like a license) is missing, state that it was not found.

Now, generate the complete Markdown documentation."""


def build_code_prompt(code: str, file_type: str, file_name: Optional[str] = None) -> str:
    """Render the single-file documentation prompt."""
    location = f" in the file {file_name}" if file_name else ""
    return f"""You're a professional technical writer and software engineer.

Generate detailed, production-grade documentation in **Markdown** for the following {file_type} code{location}. Follow these strict formatting rules:

---

## 1. Overview
- Start with a clear summary of what this file/module does.
- Explain its role within a typical project.

## 2. Exported Functions/Classes
For each export:
- **Name**
- **Description**
- **Parameters:** list in a Markdown table with name, type, and description
- **Return Value:** what it returns and when
- **Edge Cases:** any special scenarios it handles

## 3. Usage Example(s)
Provide at least one copy-paste-ready example wrapped in triple backticks.

## 4. Notes
- Include performance tips, limitations, or design decisions if relevant.

## 5. Visual Formatting
- Use **headings**, bullet points, and tables
- Syntax-highlighted code blocks

---

Code:
```{file_type}
{code}
```
"""


def build_title_prompt(content: str) -> str:
    excerpt = content[:TITLE_CONTEXT_CHARS]
    return (
        "Generate a concise, descriptive title for the following document content:"
        f"\n\n{excerpt}...\n\nTitle:"
    )


def build_fallback_document(ref: RepositoryRef) -> str:
    """Static Markdown used when repository analysis or generation fails.

    Depends only on the owner and name, so it cannot fail.
    """
    repository = ref.full_name
    name = ref.repo
    return f"""# {name}

> AI-generated documentation for **{repository}**

## Overview
This repository contains the source code for {name}. This documentation was generated automatically when detailed analysis was not available.

## Quick Start

### Installation

```bash
# Clone the repository
git clone https://github.com/{repository}.git
cd {name}

# Install dependencies (if applicable)
npm install
# or
yarn install
# or
pip install -r requirements.txt
```

### Basic Usage

```bash
# Run the application
npm start
# or
python main.py
# or
./run.sh
```

## Repository Information

- **Repository**: [{repository}](https://github.com/{repository})
- **Owner**: {ref.owner}
- **Project**: {name}

## Contributing

1. Fork the repository
2. Create your feature branch (`git checkout -b feature/amazing-feature`)
3. Commit your changes (`git commit -m 'Add some amazing feature'`)
4. Push to the branch (`git push origin feature/amazing-feature`)
5. Open a Pull Request

## License

Please check the repository for license information.

## Support

For support and questions, please visit the [GitHub repository](https://github.com/{repository}) and create an issue.

---

*This documentation was generated automatically. For more detailed information, please refer to the actual repository files and README.*"""
