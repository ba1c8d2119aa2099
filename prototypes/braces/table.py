"""
    braces.table
    ~~~~~~~~~~~~

    Brace tables answer which closing brace belongs to an opening brace. The
    grammar asks them for the opening braces that could start at a position
    and for the closing brace of the one it picked.

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD, see LICENSE.rst
"""
import unicodedata


class BracesException(Exception):
    pass


class NotFound(BracesException, KeyError):
    def __init__(self, opening):
        BracesException.__init__(self, opening)
        self.opening = opening

    def __str__(self):
        return "no closing brace for %r" % self.opening


#: Pairs of characters with the Bidi_Mirroring_Glyph property, taken from
#: BidiMirroring.txt. Only brackets and paired operators are listed, the
#: mapping is symmetric.
_MIRRORED_PAIRS = [
    ("(", ")"), ("<", ">"), ("[", "]"), ("{", "}"),
    ("«", "»"),
    ("༺", "༻"), ("༼", "༽"),
    ("᚛", "᚜"),
    ("‹", "›"),
    ("⁅", "⁆"), ("⁽", "⁾"), ("₍", "₎"),
    ("∈", "∋"), ("∉", "∌"), ("∊", "∍"),
    ("∕", "⧵"), ("∼", "∽"), ("≃", "⋍"),
    ("≒", "≓"), ("≔", "≕"),
    ("≤", "≥"), ("≦", "≧"), ("≨", "≩"),
    ("≪", "≫"), ("≮", "≯"), ("≰", "≱"),
    ("≲", "≳"), ("≴", "≵"), ("≶", "≷"),
    ("≸", "≹"), ("≺", "≻"), ("≼", "≽"),
    ("≾", "≿"), ("⊀", "⊁"), ("⊂", "⊃"),
    ("⊄", "⊅"), ("⊆", "⊇"), ("⊈", "⊉"),
    ("⊊", "⊋"), ("⊏", "⊐"), ("⊑", "⊒"),
    ("⊘", "⦸"), ("⊢", "⊣"), ("⊦", "⫞"),
    ("⊨", "⫤"), ("⊩", "⫣"), ("⊫", "⫥"),
    ("⊰", "⊱"), ("⊲", "⊳"), ("⊴", "⊵"),
    ("⊶", "⊷"), ("⋉", "⋊"), ("⋋", "⋌"),
    ("⋐", "⋑"), ("⋖", "⋗"), ("⋘", "⋙"),
    ("⋚", "⋛"), ("⋜", "⋝"), ("⋞", "⋟"),
    ("⋠", "⋡"), ("⋢", "⋣"), ("⋤", "⋥"),
    ("⋦", "⋧"), ("⋨", "⋩"), ("⋪", "⋫"),
    ("⋬", "⋭"), ("⋰", "⋱"),
    ("⌈", "⌉"), ("⌊", "⌋"), ("〈", "〉"),
    ("❨", "❩"), ("❪", "❫"), ("❬", "❭"),
    ("❮", "❯"), ("❰", "❱"), ("❲", "❳"),
    ("❴", "❵"),
    ("⟃", "⟄"), ("⟅", "⟆"), ("⟈", "⟉"),
    ("⟕", "⟖"), ("⟝", "⟞"), ("⟢", "⟣"),
    ("⟤", "⟥"), ("⟦", "⟧"), ("⟨", "⟩"),
    ("⟪", "⟫"), ("⟬", "⟭"), ("⟮", "⟯"),
    ("⦃", "⦄"), ("⦅", "⦆"), ("⦇", "⦈"),
    ("⦉", "⦊"), ("⦋", "⦌"), ("⦍", "⦐"),
    ("⦎", "⦏"), ("⦑", "⦒"), ("⦓", "⦔"),
    ("⦕", "⦖"), ("⦗", "⦘"),
    ("⧀", "⧁"), ("⧄", "⧅"), ("⧏", "⧐"),
    ("⧑", "⧒"), ("⧔", "⧕"), ("⧘", "⧙"),
    ("⧚", "⧛"), ("⧼", "⧽"),
    ("⸂", "⸃"), ("⸄", "⸅"), ("⸉", "⸊"),
    ("⸌", "⸍"), ("⸜", "⸝"), ("⸠", "⸡"),
    ("⸢", "⸣"), ("⸤", "⸥"), ("⸦", "⸧"),
    ("⸨", "⸩"),
    ("〈", "〉"), ("《", "》"), ("「", "」"),
    ("『", "』"), ("【", "】"), ("〔", "〕"),
    ("〖", "〗"), ("〘", "〙"), ("〚", "〛"),
    ("﹙", "﹚"), ("﹛", "﹜"), ("﹝", "﹞"),
    ("﹤", "﹥"),
    ("（", "）"), ("＜", "＞"), ("［", "］"),
    ("｛", "｝"), ("｟", "｠"), ("｢", "｣"),
]

BIDI_MIRRORING = {}
for left, right in _MIRRORED_PAIRS:
    BIDI_MIRRORING[left] = right
    BIDI_MIRRORING[right] = left
del left, right


def unicode_mirror(string):
    """
    Returns `string` as it would look in a mirror: reversed, with every
    character replaced by its mirroring glyph if it has one.
    """
    return "".join(
        BIDI_MIRRORING.get(character, character)
        for character in reversed(string)
    )


def _validate(string, what):
    if not isinstance(string, str) or not string:
        raise ValueError("%s must be a non-empty string, got %r" % (what, string))


class BraceTable(object):
    """
    A fixed mapping of opening to closing braces.
    """
    def __init__(self, mapping):
        mapping = dict(mapping)
        for opening, closing in mapping.items():
            _validate(opening, "opening brace")
            _validate(closing, "closing brace")
        self._mapping = mapping
        self._openings = sorted(mapping, key=lambda opening: (-len(opening), opening))

    @property
    def openings(self):
        return list(self._openings)

    @property
    def closings(self):
        return frozenset(self._mapping.values())

    def closing_for(self, opening):
        try:
            return self._mapping[opening]
        except KeyError:
            raise NotFound(opening) from None

    def openings_at(self, string, position):
        """
        Yields the opening braces `string` has at `position`, longest first.
        """
        for opening in self._openings:
            if string.startswith(opening, position):
                yield opening

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return self._mapping == other._mapping
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(frozenset(self._mapping.items()))

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._mapping)


class MirrorTable(object):
    """
    Guesses closing braces by mirroring the opening brace, see
    :func:`unicode_mirror`.

    Any run of punctuation and symbol characters can be an opening brace,
    whether the guess makes sense is decided by whether the mirrored brace
    turns up in the input where it is expected.
    """
    def closing_for(self, opening):
        return unicode_mirror(opening)

    @property
    def closings(self):
        return frozenset(BIDI_MIRRORING)

    def is_brace_character(self, character):
        return unicodedata.category(character)[0] in "PS"

    def openings_at(self, string, position):
        end = position
        while end < len(string) and self.is_brace_character(string[end]):
            end += 1
        for stop in range(end, position, -1):
            yield string[position:stop]

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return True
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.__class__)

    def __repr__(self):
        return "%s()" % self.__class__.__name__


DEFAULT_TABLE = BraceTable({"(": ")", "[": "]", "{": "}"})
