"""Keyword tables backing every lexical heuristic of the intent engine.

Phrases are written the way users type them (accents included) and are
normalized once at import time. A table matches when one of its phrases
appears in the normalized text as a whole phrase, i.e. bounded by
non-word characters, so ``"oi"`` never fires inside ``"noite"``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from tuca.nl.normalize import normalize_text, words


def _phrase_regex(phrase: str) -> str:
    return r"\W+".join(re.escape(w) for w in phrase.split(" "))


class KeywordTable:
    """An immutable, pre-normalized phrase set with whole-phrase matching."""

    __slots__ = ("name", "phrases", "_pattern")

    def __init__(self, name: str, phrases: Iterable[str]) -> None:
        normalized = (" ".join(words(normalize_text(p))) for p in phrases)
        self.name = name
        self.phrases: tuple[str, ...] = tuple(dict.fromkeys(p for p in normalized if p))
        if self.phrases:
            # Longest first so multi-word phrases win over their prefixes
            ordered = sorted(self.phrases, key=len, reverse=True)
            body = "|".join(_phrase_regex(p) for p in ordered)
            self._pattern = re.compile(rf"(?<!\w)(?:{body})(?!\w)")
        else:
            self._pattern = re.compile(r"(?!x)x")

    def matches(self, text: str) -> bool:
        """True when any phrase occurs in the normalized *text*."""
        return self._pattern.search(text) is not None

    def find_all(self, text: str) -> list[str]:
        return [m.group(0) for m in self._pattern.finditer(text)]

    def is_exactly(self, text: str) -> bool:
        """True when the whole of *text*, punctuation aside, is one phrase."""
        return " ".join(words(text)) in self.phrases

    def strip(self, text: str) -> str:
        """Remove every phrase occurrence from *text*."""
        return self._pattern.sub(" ", text)

    def __contains__(self, phrase: object) -> bool:
        return isinstance(phrase, str) and " ".join(words(normalize_text(phrase))) in self.phrases

    def __len__(self) -> int:
        return len(self.phrases)

    def __repr__(self) -> str:
        return f"KeywordTable({self.name!r}, {len(self.phrases)} phrases)"


def contains_any(text: str, table: KeywordTable) -> bool:
    return table.matches(text)


def matched_phrases(text: str, table: KeywordTable) -> list[str]:
    """Phrase occurrences of *table* in *text*, in reading order."""
    return table.find_all(text)


# ---------------------------------------------------------------------------
# Trivial interactions
# ---------------------------------------------------------------------------

GREETING = KeywordTable("greeting", [
    "oi", "oie", "olá", "ola", "opa", "eae", "eaí", "e aí", "fala", "fala aí",
    "salve", "hey", "bom dia", "boa tarde", "boa noite", "tudo bem", "tudo bom",
    "tudo certo", "como vai",
])

THANKS = KeywordTable("thanks", [
    "obrigado", "obrigada", "muito obrigado", "muito obrigada", "obg", "brigado",
    "brigada", "valeu", "vlw", "agradeço", "grato", "grata", "thanks",
    "obrigado pela ajuda", "obrigada pela ajuda", "valeu pela ajuda",
    "obrigado pela dica", "obrigada pela dica", "valeu pela dica",
])

FAREWELL = KeywordTable("farewell", [
    "tchau", "tchauzinho", "até mais", "até logo", "até amanhã", "até depois",
    "até a próxima", "falou", "flw", "bye", "adeus", "fui", "boa semana",
    "bom descanso", "até breve",
])

# ---------------------------------------------------------------------------
# Pending yes/no answers
# ---------------------------------------------------------------------------

AFFIRMATIVE = KeywordTable("affirmative", [
    "sim", "s", "ss", "claro", "claro que sim", "pode", "pode ser", "pode sim",
    "ok", "okay", "beleza", "blz", "bora", "manda", "manda ver", "quero",
    "quero sim", "com certeza", "certo", "isso mesmo", "positivo",
    "fechado", "perfeito", "yes", "uhum", "aham", "demorou", "vamos",
    "sim por favor", "por favor", "faz isso", "show",
])

NEGATIVE = KeywordTable("negative", [
    "não", "nao", "n", "nn", "não quero", "agora não", "não obrigado",
    "não obrigada", "não precisa", "claro que não", "negativo", "nem",
    "deixa", "deixa pra lá", "melhor não", "nope", "dispenso",
    "outra hora", "fica pra próxima",
])

# ---------------------------------------------------------------------------
# Keyword cascade categories
# ---------------------------------------------------------------------------

HUMOR_SCRIPT = KeywordTable("humor_script_request", [
    "roteiro de humor", "roteiro engraçado", "roteiro cômico", "roteiro divertido",
    "script de humor", "script engraçado", "esquete", "sketch", "vídeo engraçado",
    "video de humor", "conteúdo de humor", "post engraçado", "comédia",
    "humorístico", "stand up", "piada", "piadas",
])

BEST_TIME = KeywordTable("ASK_BEST_TIME", [
    "melhor dia", "melhor hora", "melhor horário", "melhores dias",
    "melhores horas", "melhores horários", "qual dia", "qual hora",
    "qual horário", "que horas postar", "que horas devo postar", "quando postar",
    "quando devo postar", "horário para postar", "horários para postar",
    "frequência", "cadência", "dia da semana", "dias da semana",
])

CONTENT_PLAN = KeywordTable("content_plan", [
    "planejamento", "plano de conteúdo", "planejamento de conteúdo",
    "agenda de posts", "calendário editorial", "calendário de posts",
    "o que postar essa semana", "o que postar esta semana", "sugestão de agenda",
    "me dá um plano", "me da um plano", "cria um plano", "crie um plano",
    "planejar a semana", "cronograma de posts", "cronograma de conteúdo",
])

SCRIPT = KeywordTable("script_request", [
    "roteiro", "roteiros", "script", "scripts", "estrutura de post",
    "estrutura de vídeo", "outline", "escreve pra mim", "escreve para mim",
    "como fazer vídeo sobre", "roteiriza", "roteirizar", "escreva um roteiro",
    "texto para o vídeo", "legenda para",
])

BEST_PERFORMER = KeywordTable("ASK_BEST_PERFORMER", [
    "qual post performou melhor", "qual formato performa melhor", "melhor post",
    "melhor conteúdo", "melhor formato", "post que mais", "conteúdo que mais",
    "o que mais deu certo", "maior engajamento", "melhor desempenho",
    "performou melhor", "mais engajou", "campeão de", "qual conteúdo foi melhor",
    "qual foi o melhor",
])

DEMOGRAPHIC = KeywordTable("demographic_query", [
    "demografia", "demográfico", "demográficos", "dados demográficos", "público",
    "meu público", "audiência", "faixa etária", "idade dos seguidores",
    "gênero dos seguidores", "cidade dos seguidores", "de onde são meus seguidores",
    "perfil dos seguidores", "quem me segue", "localização dos seguidores",
])

COMMUNITY_INSPIRATION = KeywordTable("ask_community_inspiration", [
    "inspiração da comunidade", "inspirações da comunidade", "exemplos da comunidade",
    "posts da comunidade", "comunidade", "outros criadores", "o que outros criadores",
    "referências de outros", "inspiração de outros", "exemplos de outros criadores",
    "posts de outros criadores", "mostra exemplos de",
])

CONTENT_IDEAS = KeywordTable("content_ideas", [
    "ideia", "ideias", "sugestão de post", "sugestões de post", "sugere",
    "sugira", "sugestão", "sugestões", "o que postar", "inspiração", "inspirações",
    "exemplos de posts", "dicas de conteúdo", "ideias criativas", "pauta", "pautas",
])

RANKING = KeywordTable("ranking_request", [
    "ranking", "top", "melhores", "piores", "classificação", "quais performam",
    "performam melhor", "performam pior", "lista de", "ordena", "ordenar",
])

REPORT = KeywordTable("report", [
    "relatório", "plano", "estratégia", "detalhado", "completo", "performance",
    "analisa", "analise", "análise", "visão geral", "desempenho", "resumo",
    "métricas", "como estou indo", "como foi meu mês", "balanço",
])

SOCIAL = KeywordTable("social_query", [
    "namorada", "namorado", "você é casado", "você é casada", "você tem amigos",
    "você gosta de", "qual seu filme", "qual sua música", "qual sua cor",
    "como você está", "como vai você", "você é real", "você é humano",
    "você tem sentimentos", "bater papo", "conversar", "fofoca", "futebol",
    "você dorme", "você come",
])

META_PERSONAL = KeywordTable("meta_query_personal", [
    "quem é você", "quem é vc", "o que você faz", "o que vc faz", "o que você sabe",
    "quem te criou", "você é uma ia", "você é um robô", "como você funciona",
    "qual seu nome", "qual é seu nome", "o que você lembra", "seu objetivo",
    "suas funções", "para que você serve", "pra que você serve",
    "o que você sabe sobre mim",
])

# ---------------------------------------------------------------------------
# Contextual follow-ups
# ---------------------------------------------------------------------------

CLARIFICATION = KeywordTable("clarification", [
    "não entendi", "nao compreendi", "como assim", "explica melhor",
    "explique melhor", "o que você quis dizer", "o que quis dizer",
    "quis dizer o que", "pode explicar", "não ficou claro", "pode esclarecer",
    "esclarece", "esclareça", "pode repetir", "que quer dizer", "o que significa",
    "explica de novo",
])

METRIC_DETAILS = KeywordTable("metric_details", [
    "quais os números", "quais números", "me mostra os números", "mostra os números",
    "números exatos", "valores exatos", "detalha os números", "detalhes da métrica",
    "detalhes das métricas", "qual foi o alcance", "quanto foi", "quantos",
    "quantas", "qual a taxa", "qual o número", "mostra os dados",
    "me passa os dados", "em números", "qual o valor", "qual a média",
])

DATA_SOURCE = KeywordTable("data_source", [
    "de onde vem", "de onde vêm", "de onde vieram", "de onde você tirou",
    "de onde tirou", "de onde saiu", "qual a fonte", "quais as fontes",
    "fonte dos dados", "como você calculou", "como calculou", "baseado em que",
    "com base em que", "como você sabe", "da onde",
])

CONTINUATION = KeywordTable("continuation", [
    "me fala mais", "fala mais", "conta mais", "me conta mais", "sobre isso",
    "e sobre", "mais sobre", "continua", "continue", "pode continuar",
    "aprofunda", "aprofundar", "aprofunde", "e depois", "e então", "e aí",
    "e o que mais", "mais detalhes", "segue", "prossiga", "vai em frente",
    "e isso", "e esse", "e essa",
])

METRIC_TOPIC = KeywordTable("metric_topic", [
    "métrica", "métricas", "análise", "analise", "engajamento", "alcance",
    "desempenho", "performance", "seguidores", "visualizações", "views",
    "curtidas", "likes", "comentários", "compartilhamentos", "salvamentos",
    "dados", "estatística", "estatísticas", "crescimento", "impressões",
    "relatório", "taxa",
])
