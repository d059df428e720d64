"""
Text Segmentation Engine: free text -> ordered items or titled sections.

Language model output rarely follows the list format it was asked for, so the
display layer runs these heuristics over every advice field:

split_numbered_list()   strict fallback cascade for recommendation/step lists
split_advice_sections() keyword driven titles for expert advice prose

The keyword list and the thresholds (100 char titles, 10 tokens, 15 word
chunks) are tuned to Korean legal prose and are behavioural contracts.

Diagnostics are emitted as plain dict events to an optional sink instead of
being printed, e.g. {'operation': 'numbered_list', 'stage': 2,
'strategy': 'marker_split', 'items': 3}.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from advice_models import AdviceSection

EventSink = Callable[[Dict[str, Any]], None]

# A list marker: "1." "12)" "가." "나)" "a." "B)"
MARKER = r'(?:\d+[.)]|[가-힣][.)]|[a-zA-Z][.)])'

LINE_MARKER_PATTERN = re.compile(r'^\s*' + MARKER + r'\s')
LEADING_MARKER_PATTERN = re.compile(r'^\s*' + MARKER + r'\s+')
INNER_MARKER_PATTERN = re.compile(r'\s+' + MARKER + r'\s+')
STRIP_MARKER_PATTERN = re.compile(r'^\s*' + MARKER + r'\s*')

# Stage 3 alternatives, tried in order
ALTERNATIVE_ITEM_PATTERNS: List[Tuple[str, Pattern]] = [
    ('decimal_items', re.compile(r'(\d+[.)]\s+[^0-9.)]+)(?=\s+\d+[.)]|$)')),
    ('letter_items', re.compile(r'([a-zA-Z가-힣][.)]\s+[^a-zA-Z가-힣.)]+)(?=\s+[a-zA-Z가-힣][.)]|$)')),
]

DECIMAL_MARKER_PATTERN = re.compile(r'(?<!\d)\d+[.)]')
DECIMAL_SPLIT_PATTERN = re.compile(r'(?<!\d)(?=\d+[.)])')
SENTENCE_SPLIT_PATTERN = re.compile(r'(?<=\.\s)(?=[^0-9])')
LINE_SPLIT_PATTERN = re.compile(r'\r?\n+')
BLOCK_SPLIT_PATTERN = re.compile(r'\n\n|\r\n\r\n')

CHUNK_THRESHOLD = 100
CHUNK_WORDS = 15

# Expert advice section titles
SECTION_KEYWORDS = [
    "성공 가능성", "위험 요소", "법원", "상대방", "전략적", "접근법",
    "협상", "소송", "중요한", "고려사항", "행동 계획", "법적 대응"
]
SECTION_TITLE_MAX_LENGTH = 100
SECTION_TITLE_MAX_TOKENS = 10

# Inline numbered items of an analysis paragraph
PARAGRAPH_ITEM_PATTERN = re.compile(r'(\d+[.)]\s+[^\d].*?)(?=\s+\d+[.)]|$)')

# Citations emphasised in the analysis view
STATUTE_PATTERN = re.compile(r'([가-힣]+\s*제\d+조(?:\s*제\d+항)?(?:\s*제\d+호)?)')
CASE_PATTERN = re.compile(r'(대법원\s*\d+\s*[가-힣]+\s*\d+|서울고등법원\s*\d+\s*[가-힣]+\s*\d+)')


def _non_empty_lines(text: str) -> List[str]:
    return [line for line in LINE_SPLIT_PATTERN.split(text) if line.strip()]


def _trimmed(items: List[str]) -> List[str]:
    return [item.strip() for item in items if item.strip()]


class TextSegmenter:
    """
    Segmentation cascade with optional diagnostics.

    Args:
        event_sink: callable receiving one dict per decision, or None
    """

    def __init__(self, event_sink: Optional[EventSink] = None):
        self.event_sink = event_sink

    def _emit(self, operation: str, stage: int, strategy: str, items: int):
        if self.event_sink is not None:
            self.event_sink({
                'operation': operation,
                'stage': stage,
                'strategy': strategy,
                'items': items
            })

    def _done(self, stage: int, strategy: str, items: List[str]) -> List[str]:
        self._emit('numbered_list', stage, strategy, len(items))
        return items

    def split_numbered_list(self, text: str) -> List[str]:
        """
        Split text into list items, most structure-revealing strategy first.

        Stages:
        1. every line starts with a marker
        2. leading marker, then split at each later marker
        3. global alternative item patterns (more than one match)
        4. forced split before each decimal marker
        5. sentence boundaries (". " not followed by a digit)
        6. 15 word chunks for text longer than 100 characters
        7. the whole text as one item
        """
        if not text or not text.strip():
            return self._done(0, 'empty', [""])

        # 1. one item per line
        lines = _non_empty_lines(text)
        if len(lines) > 1 and all(LINE_MARKER_PATTERN.match(line.strip()) for line in lines):
            return self._done(1, 'numbered_lines', _trimmed(lines))

        # 2. "1. a 2. b 3. c" on one line
        first = LEADING_MARKER_PATTERN.match(text)
        if first:
            remaining = text[first.end():]
            starts = [m.start() for m in INNER_MARKER_PATTERN.finditer(remaining)]
            if starts:
                items = [first.group(0) + remaining[:starts[0]]]
                bounds = starts + [len(remaining)]
                for start, end in zip(bounds, bounds[1:]):
                    items.append(remaining[start:end])
                items = _trimmed(items)
                if len(items) > 1:
                    return self._done(2, 'marker_split', items)

        # 3. marker items somewhere inside the text
        for strategy, pattern in ALTERNATIVE_ITEM_PATTERNS:
            matches = [m.group(1).strip() for m in pattern.finditer(text)]
            if len(matches) > 1:
                return self._done(3, strategy, matches)

        # 4. split before every decimal marker
        if len(DECIMAL_MARKER_PATTERN.findall(text)) > 1:
            fragments = _trimmed(DECIMAL_SPLIT_PATTERN.split(text))
            if len(fragments) > 1:
                return self._done(4, 'forced_decimal_split', fragments)

        # 5. sentences
        sentences = _trimmed(SENTENCE_SPLIT_PATTERN.split(text))
        if len(sentences) > 1:
            return self._done(5, 'sentences', sentences)

        # 6. fixed size word chunks
        if len(text) > CHUNK_THRESHOLD:
            words = text.split()
            chunks = [
                ' '.join(words[i:i + CHUNK_WORDS])
                for i in range(0, len(words), CHUNK_WORDS)
            ]
            if len(chunks) > 1:
                return self._done(6, 'word_chunks', chunks)

        return self._done(7, 'whole_text', [text.strip()])

    def split_advice_sections(self, text: str) -> List[AdviceSection]:
        """
        Split expert advice prose into titled sections.

        A title line opens a new section only once the current one has
        content; before that it just replaces the (empty) current title.
        """
        if not text or not text.strip():
            self._emit('advice_sections', 0, 'empty', 0)
            return []

        lines = [line.strip() for line in text.split('\n') if line.strip()]

        sections: List[AdviceSection] = []
        current = AdviceSection(title="", content=[])

        for line in lines:
            if is_section_title(line):
                if current.content:
                    sections.append(current)
                    current = AdviceSection(title=line, content=[])
                else:
                    current.title = line
            else:
                current.content.append(line)

        if current.content:
            sections.append(current)

        if not sections:
            self._emit('advice_sections', 2, 'untitled', 1)
            return [AdviceSection(title="", content=lines)]

        self._emit('advice_sections', 1, 'keyword_titles', len(sections))
        return sections


def is_section_title(line: str) -> bool:
    """Short line naming one of the advice topics"""
    lowered = line.lower()
    if not any(keyword.lower() in lowered for keyword in SECTION_KEYWORDS):
        return False
    if len(line) >= SECTION_TITLE_MAX_LENGTH:
        return False
    return ":" in line or "." in line or len(line.split()) < SECTION_TITLE_MAX_TOKENS


def strip_list_marker(item: str) -> str:
    """Remove the leading "1." / "가)" / "a." marker from a list item"""
    return STRIP_MARKER_PATTERN.sub('', item, count=1)


def split_numbered_list(text: str, event_sink: Optional[EventSink] = None) -> List[str]:
    return TextSegmenter(event_sink).split_numbered_list(text)


def split_advice_sections(text: str, event_sink: Optional[EventSink] = None) -> List[AdviceSection]:
    return TextSegmenter(event_sink).split_advice_sections(text)


def split_blocks(text: str) -> List[str]:
    """Blank-line separated blocks of text, stripped, empty ones dropped"""
    return _trimmed(BLOCK_SPLIT_PATTERN.split(text or ""))


def split_paragraphs(text: str) -> List[str]:
    """Paragraphs of a legal analysis item, one per line or numbered item"""
    if not text:
        return [""]

    lines = _non_empty_lines(text)
    if len(lines) <= 1:
        matches = [m.group(1) for m in PARAGRAPH_ITEM_PATTERN.finditer(text)]
        if len(matches) > 1:
            return matches

    return lines


def highlight_references(text: str, pattern: Pattern = STATUTE_PATTERN) -> List[Tuple[str, bool]]:
    """
    Cut text into (segment, is_reference) pairs for emphasis.

    Joining the segments gives back the original text.
    """
    segments: List[Tuple[str, bool]] = []
    position = 0
    for match in pattern.finditer(text or ""):
        if match.start() > position:
            segments.append((text[position:match.start()], False))
        segments.append((match.group(0), True))
        position = match.end()
    if position < len(text or ""):
        segments.append((text[position:], False))
    return segments
