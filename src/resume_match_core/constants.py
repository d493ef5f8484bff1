"""Shared constants and enums for resume-match-agent."""

from __future__ import annotations

# Prompt versions: increment when prompt templates change
SKILL_EXTRACTOR_PROMPT_VERSION = "v1"
CHAT_ASSEMBLER_PROMPT_VERSION = "v1"

SKILL_CATEGORIES: tuple[str, ...] = ("hard", "soft", "tool", "technique", "domain", "other")
SKILL_IMPORTANCES: tuple[str, ...] = ("must_have", "nice_to_have", "unspecified")

# Match score weights by JD skill importance
IMPORTANCE_WEIGHTS: dict[str, int] = {
    "must_have": 2,
    "nice_to_have": 1,
    "unspecified": 1,
}

# Characters kept by skill-name normalization besides word characters and spaces
NORMALIZED_NAME_EXTRA_CHARS = "+.#/&()-"

MAX_EVIDENCE_SNIPPET_CHARS = 280
MAX_SOURCE_EXCERPT_CHARS = 200
MAX_EXTRA_SKILLS_PREVIEW = 8
MAX_HIGHLIGHT_STRENGTHS = 3

# Keyword dictionary used by the fallback matcher
SKILL_DICTIONARY: tuple[str, ...] = (
    # Programming languages
    "javascript", "typescript", "python", "java", "c#", "c++", "c", "go", "rust",
    "php", "ruby", "swift", "kotlin", "scala",
    # Web
    "react", "vue", "angular", "node.js", "nodejs", "express", "next.js", "nuxt.js",
    "svelte", "html", "css", "sass", "less",
    # Databases
    "postgresql", "postgres", "mysql", "mongodb", "redis", "elasticsearch", "sqlite",
    "dynamodb", "cassandra", "neo4j",
    # Cloud & DevOps
    "aws", "azure", "gcp", "google cloud", "docker", "kubernetes", "terraform",
    "jenkins", "gitlab", "github actions", "circleci",
    # Frameworks
    "spring", "django", "flask", "laravel", "rails", "asp.net", ".net", "jquery",
    "bootstrap", "tailwind",
    # Tools
    "git", "linux", "nginx", "apache", "microservices", "api", "rest", "graphql",
    "websockets", "oauth", "jwt",
    # Data
    "machine learning", "ml", "ai", "data science", "pandas", "numpy", "tensorflow",
    "pytorch", "spark", "hadoop",
    # Testing
    "jest", "cypress", "selenium", "unit testing", "integration testing", "tdd", "bdd",
    # Process
    "agile", "scrum", "kanban", "jira", "confluence", "project management",
)
