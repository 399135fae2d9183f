"""
Intent resolver: deterministic corrections applied to the classifier's guess.

The classifier is good at picking a broad intent but unreliable at filling
in paths, directories and "this file" style references. The resolver runs an
ordered list of rules over the raw intent, the literal message and the recent
message history. The first rule that matches wins.

Handles:
- Structure requests: "mostre a estrutura do projeto"
- Anaphora: "explique esse código", "modifique este arquivo"
- Bare listings: "liste os arquivos", "liste a pasta atual"
- Directory listings: "quais arquivos tem na pasta src"
- File reads: "leia o arquivo src/index.ts"
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from devtask.context.conversation import ConversationContext
from devtask.intents import Intent, IntentType, Message, MessageRole
from devtask.utils.logging import logger
from devtask.utils.response_formatter import extract_file_reference

# Keys the classifier tends to use instead of "path"
FILE_PATH_ALIASES = ("file", "filePath", "file_path", "filename", "arquivo")
DIRECTORY_ALIASES = ("directory", "dir", "folder", "pasta")
TASK_ID_ALIASES = ("task_id", "id")

STRUCTURE_PATTERN = re.compile(r"(?i)\b(estrutura|structure|árvore|arvore|tree)\b")

FILE_DEICTIC_PATTERN = re.compile(
    r"(?i)\b(esse|este|essa|esta|desse|deste|dessa|desta|nesse|neste|nessa|nesta|aquele|daquele|naquele|mesmo)\s+"
    r"(arquivo|código|codigo|script)\b"
    r"|\b(this|that|the same)\s+(file|code|script)\b"
)
MODIFY_VERB_PATTERN = re.compile(
    r"(?i)\b(modifique|modificar|modifica|altere|alterar|altera|edite|editar|edita|modify|edit)\b"
)
EXPLAIN_VERB_PATTERN = re.compile(
    r"(?i)\b(explique|explicar|explica|explain|descreva|descrever|describe)\b|\bo que (esse|este) (código|codigo|arquivo) faz\b"
)
CODE_NOUN_PATTERN = re.compile(r"(?i)\b(código|codigo|code|arquivo|file|script)\b")
LIST_VERB_PATTERN = re.compile(r"(?i)\b(liste|listar|lista|list|ls)\b")
DIRECTORY_VERB_PATTERN = re.compile(
    r"(?i)\b(liste|listar|lista|mostre|mostrar|mostra|exiba|exibir|ver|veja|quais|list|show|ls)\b|\bo que tem\b"
)
DIRECTORY_NOUN_PATTERN = re.compile(
    r"(?i)\b(pastas?|diret[óo]rios?|arquivos|folders?|director(?:y|ies)|files)\b"
)
READ_VERB_PATTERN = re.compile(
    r"(?i)\b(leia|ler|lê|le|mostre|mostrar|mostra|abra|abrir|abre|exiba|exibir|ver|veja|read|show|open|cat|conteúdo|conteudo)\b"
)
WRITE_VERB_PATTERN = re.compile(
    r"(?i)\b(crie|criar|cria|create|escreva|escrever|write|modifique|modificar|modifica|altere|alterar|edite|editar"
    r"|modify|edit|exclua|excluir|apague|apagar|delete|remova|remover|remove|renomeie|rename)\b"
)
NON_FILE_NOUN_PATTERN = re.compile(
    r"(?i)\b(tarefas?|tasks?|issues?|milestones?|projetos?|projects?|sprints?)\b"
)
TASK_NOUN_PATTERN = re.compile(r"(?i)\b(tarefas?|tasks?|issues?|milestones?|sprints?)\b")
CURRENT_DIRECTORY_PATTERN = re.compile(
    r"(?i)\b(pasta|diret[óo]rio|folder|directory)\s+(atual|corrente|mesm[ao])\b"
    r"|\b(esta|essa|nesta|nessa|desta|dessa|este|esse|neste|nesse|deste|desse|mesma|mesmo)\s+(pasta|diret[óo]rio)\b"
    r"|\b(this|current|same)\s+(folder|directory)\b"
)

# name.ext, optionally with directories in front
FILE_TOKEN = r"(?:[\w.-]+/)*[\w-][\w.-]*\.[A-Za-z][A-Za-z0-9]{0,9}"
FILE_TOKEN_PATTERN = re.compile(rf"(?i)(?<![\w/.-])({FILE_TOKEN})(?![\w/])")

# Ordered: keyword-prefixed before the bare token
FILE_PATH_PATTERNS = [
    re.compile(rf"(?i)\b(?:arquivo|file|código|codigo)\s+['\"`]?({FILE_TOKEN})['\"`]?"),
    FILE_TOKEN_PATTERN,
]

# User messages that asked to see a specific file
READ_REQUEST_PATTERNS = [
    re.compile(rf"(?i)\b(?:leia|ler|lê|le|read|cat)\s+(?:o\s+|a\s+|the\s+)?(?:arquivo\s+|file\s+)?['\"`]?({FILE_TOKEN})"),
    re.compile(rf"(?i)\b(?:mostre|mostrar|mostra|show|exiba|exibir)\s+(?:o\s+|a\s+|the\s+)?(?:arquivo\s+|file\s+|conteúdo\s+(?:de|do)\s+)?['\"`]?({FILE_TOKEN})"),
    re.compile(rf"(?i)\b(?:abra|abrir|abre|open|ver|veja|view)\s+(?:o\s+|a\s+|the\s+)?(?:arquivo\s+|file\s+)?['\"`]?({FILE_TOKEN})"),
]

# Ordered: explicit keyword, then any path with a slash, then conventional names
DIRECTORY_KEYWORD_PATTERN = re.compile(
    r"(?i)\b(?:pasta|diret[óo]rio|folder|directory|dir)\s+(?:(?:de|do|da|em|the)\s+)?['\"`]?([\w./-]+)['\"`]?"
)
DIRECTORY_SLASH_PATTERN = re.compile(r"(?i)(?<![\w.-])((?:\.{1,2}/)?[\w.-]+(?:/[\w.-]+)+/?|\.{1,2}/[\w.-]+/?)")
CONVENTIONAL_DIRECTORY_PATTERN = re.compile(
    r"(?i)\b(src|lib|tests?|docs|dist|build|public|scripts|config|components|utils|assets|bin)\b"
)
DIRECTORY_STOPWORDS = {
    "atual", "corrente", "mesma", "mesmo", "do", "de", "da", "em", "the", "this", "current", "same",
    "que", "onde", "com", "e", "para",
}
ROOT_DIRECTORY_WORDS = {"raiz", "root", "principal"}


@dataclass
class ResolutionRule:
    """One correction rule. `apply` returns True when it handled the intent."""

    name: str
    apply: Callable[[Intent, str, list[Message]], bool]


def extract_file_path(message: str) -> Optional[str]:
    """First file path mentioned in the message, keyword-prefixed forms first."""
    for pattern in FILE_PATH_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def extract_directory_path(message: str) -> Optional[str]:
    """First directory mentioned in the message, or None."""
    for match in DIRECTORY_KEYWORD_PATTERN.finditer(message):
        candidate = match.group(1).rstrip(",;:!?")
        if candidate not in (".", "..") and candidate.endswith("."):
            candidate = candidate.rstrip(".")
        if not candidate:
            continue
        if candidate.lower() in ROOT_DIRECTORY_WORDS:
            return "."
        if candidate.lower() not in DIRECTORY_STOPWORDS:
            return candidate

    for match in DIRECTORY_SLASH_PATTERN.finditer(message):
        candidate = match.group(1)
        last = candidate.rstrip("/").rsplit("/", 1)[-1]
        if "." in last.strip("."):
            continue  # looks like a file
        return candidate.rstrip("/") or "."

    match = CONVENTIONAL_DIRECTORY_PATTERN.search(message)
    if match:
        return match.group(1)
    return None


def normalize_parameters(intent: Intent) -> Intent:
    """Copy common classifier aliases onto canonical keys, keeping the originals."""
    params = intent.parameters
    if not intent.has_param("path"):
        for alias in FILE_PATH_ALIASES:
            if intent.has_param(alias):
                params["path"] = params[alias]
                break
    if not intent.has_param("path"):
        for alias in DIRECTORY_ALIASES:
            if intent.has_param(alias):
                params["path"] = params[alias]
                break
    if intent.type == IntentType.TASK and not intent.has_param("taskId"):
        for alias in TASK_ID_ALIASES:
            if intent.has_param(alias):
                params["taskId"] = params[alias]
                break
    return intent


class IntentResolver:
    """
    Applies the ordered correction rules to a classified intent.

    Rules only add or override fields; parameters the classifier filled in
    survive unless a rule forces a different type/action and sets them.
    """

    def __init__(self, context: ConversationContext):
        self.context = context
        self.rules: list[ResolutionRule] = [
            ResolutionRule("structure", self._resolve_structure),
            ResolutionRule("anaphora", self._resolve_anaphora),
            ResolutionRule("bare_list", self._resolve_bare_list),
            ResolutionRule("explain_code", self._resolve_explain_code),
            ResolutionRule("directory_listing", self._resolve_directory_listing),
            ResolutionRule("file_read", self._resolve_file_read),
            ResolutionRule("path_completion", self._complete_path),
        ]

    def resolve(self, intent: Intent, message: str, history: Optional[list[Message]] = None) -> Intent:
        """Finalize `intent` in place and return it."""
        history = history if history is not None else self.context.recent_messages()
        text = message or ""
        normalize_parameters(intent)

        for rule in self.rules:
            if rule.apply(intent, text, history):
                logger.info(f"Resolver rule '{rule.name}' -> {intent.type.value}.{intent.action} {intent.parameters}")
                break
        return intent

    # --- Lookups ---

    def find_recent_file(self, history: list[Message]) -> Optional[str]:
        """
        Most recently discussed file: newest history message first, then the
        reference store, then the current file in state.
        """
        for message in reversed(history):
            if message.role == MessageRole.ASSISTANT:
                path = extract_file_reference(message.content)
                if path:
                    return path
            elif message.role == MessageRole.USER:
                for pattern in READ_REQUEST_PATTERNS:
                    match = pattern.search(message.content)
                    if match:
                        return match.group(1)

        return self.context.references.most_recent_file() or self.context.state.current_file

    def _current_directory_reference(self, text: str) -> Optional[str]:
        if CURRENT_DIRECTORY_PATTERN.search(text):
            return self.context.references.most_recent_directory()
        return None

    # --- Rules ---

    def _resolve_structure(self, intent: Intent, text: str, history: list[Message]) -> bool:
        if not STRUCTURE_PATTERN.search(text) or TASK_NOUN_PATTERN.search(text):
            return False
        intent.force(IntentType.FILE, "structure", path=".")
        return True

    def _resolve_anaphora(self, intent: Intent, text: str, history: list[Message]) -> bool:
        deictic = FILE_DEICTIC_PATTERN.search(text)
        bare_modify = (
            MODIFY_VERB_PATTERN.search(text)
            and not intent.has_param("path")
            and not NON_FILE_NOUN_PATTERN.search(text)
        )
        if not (deictic or bare_modify) or FILE_TOKEN_PATTERN.search(text):
            return False

        path = self.find_recent_file(history)
        if not path:
            return False

        if MODIFY_VERB_PATTERN.search(text):
            intent.force(IntentType.FILE, "modify", path=path)
        elif EXPLAIN_VERB_PATTERN.search(text):
            intent.force(IntentType.CODE, "explain", path=path)
        else:
            intent.force(IntentType.FILE, "read", path=path)
        return True

    def _resolve_bare_list(self, intent: Intent, text: str, history: list[Message]) -> bool:
        if not LIST_VERB_PATTERN.search(text) or NON_FILE_NOUN_PATTERN.search(text):
            return False
        if intent.has_param("path") or extract_directory_path(text) is not None:
            return False
        intent.force(IntentType.FILE, "list", path=self._current_directory_reference(text) or ".")
        return True

    def _resolve_explain_code(self, intent: Intent, text: str, history: list[Message]) -> bool:
        if not (EXPLAIN_VERB_PATTERN.search(text) and CODE_NOUN_PATTERN.search(text)):
            return False
        if FILE_TOKEN_PATTERN.search(text) or intent.has_param("code"):
            return False
        path = self.find_recent_file(history)
        if not path:
            return False
        intent.force(IntentType.CODE, "explain", path=path)
        return True

    def _resolve_directory_listing(self, intent: Intent, text: str, history: list[Message]) -> bool:
        if not (DIRECTORY_VERB_PATTERN.search(text) and DIRECTORY_NOUN_PATTERN.search(text)):
            return False
        if FILE_TOKEN_PATTERN.search(text) or WRITE_VERB_PATTERN.search(text) or NON_FILE_NOUN_PATTERN.search(text):
            return False
        path = extract_directory_path(text) or self._current_directory_reference(text) or "."
        intent.force(IntentType.FILE, "list", path=path)
        return True

    def _resolve_file_read(self, intent: Intent, text: str, history: list[Message]) -> bool:
        if not READ_VERB_PATTERN.search(text) or WRITE_VERB_PATTERN.search(text):
            return False
        path = extract_file_path(text)
        if not path:
            return False
        intent.force(IntentType.FILE, "read", path=path)
        return True

    def _complete_path(self, intent: Intent, text: str, history: list[Message]) -> bool:
        if intent.has_param("path"):
            return False
        if intent.matches(IntentType.FILE, "read"):
            intent.parameters["path"] = extract_file_path(text) or "."
            return True
        if intent.matches(IntentType.FILE, "list"):
            intent.parameters["path"] = extract_directory_path(text) or "."
            return True
        return False
