"""Site templates: prompt text and image slots as data.

Prompt strings are ``str.format`` templates receiving ``coin_name``,
``color_palette`` and ``project_description``; they must not contain any
other braces.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from coinforge.models.job import UserInputs

LOGO_TOKEN = "IMAGE_PLACEHOLDER_LOGO"
BACKGROUND_TOKEN = "IMAGE_PLACEHOLDER_BG"


class ImageSlot(BaseModel):
    """A named token in the document that is replaced by a generated image."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    token: str = Field(..., pattern=r"^[A-Z][A-Z0-9_]+$")
    prompt: str
    size: str = Field("256x256", pattern=r"^\d+x\d+$")

    def render_prompt(self, inputs: UserInputs) -> str:
        return self.prompt.format(**inputs.prompt_values())


class SiteTemplate(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    system_prompt: str
    user_prompt: str
    slots: list[ImageSlot]

    def render_system_prompt(self, inputs: UserInputs) -> str:
        return self.system_prompt.format(**inputs.prompt_values()).strip()

    @property
    def tokens(self) -> list[str]:
        return [slot.token for slot in self.slots]


LANDING_TEMPLATE = SiteTemplate(
    name="landing",
    system_prompt="""
You are an advanced website building AI. Produce a single-page, polished
HTML/CSS/JS site for a memecoin with the following structure:

1) Non-sticky navigation bar at the top
   - IMAGE_PLACEHOLDER_LOGO as the logo on the left.
   - Unclickable links (Home, Roadmap, Tokenomics, Exchanges) on the right.

2) Hero section below the navigation
   - Strong gradient background derived from "{color_palette}".
   - IMAGE_PLACEHOLDER_BG used as a decorative background or element.
   - Large heading with the coin name: "{coin_name}".
   - Subheading referencing the project description: "{project_description}".

3) Roadmap section
   - Vertical timeline of steps, each with a small progress bar.
   - Placeholder content.

4) Tokenomics section
   - Heading followed by exactly 3 cards laid out vertically with clean
     animations and crisp gradients.

5) Exchanges and analytics section
   - Heading above a flex grid of 6 cards, one exchange or analytics
     platform per card, using placeholder names.

6) Non-sticky footer at the end of the page content
   - Disclaimers and social links.
   - IMAGE_PLACEHOLDER_LOGO again.

Styling requirements:
   - Shimmer effects and transitions; gradients from white or black into the
     color palette "{color_palette}" in the main backgrounds.
   - Fully responsive for desktop and mobile.

Output requirements:
   - One complete HTML document with the CSS in a style element and the
     JavaScript in a script element; title it "{coin_name}".
   - Use the literal tokens IMAGE_PLACEHOLDER_LOGO and IMAGE_PLACEHOLDER_BG
     wherever the images belong.
   - No code fences, no explanations, only the document.
""",
    user_prompt=(
        "Generate the single-file site now, strictly following the color palette, "
        "non-sticky nav and footer, 3 token cards, vertical roadmap timeline, "
        "no leftover code fences. Responsive and modern."
    ),
    slots=[
        ImageSlot(
            token=LOGO_TOKEN,
            prompt=(
                'logo for a memecoin called "{coin_name}", color palette "{color_palette}", '
                "project vibe: {project_description}, small eye-catching design. "
                "Must match the coin name."
            ),
            size="256x256",
        ),
        ImageSlot(
            token=BACKGROUND_TOKEN,
            prompt=(
                'hero background for a memecoin called "{coin_name}", color palette '
                '"{color_palette}", referencing {project_description}, advanced gradient '
                "or shimmer, futuristic. Must match the coin name and color vibe."
            ),
            size="256x256",
        ),
    ],
)

CLASSIC_TEMPLATE = SiteTemplate(
    name="classic",
    system_prompt="""
You are a coding AI specialized in building modern, visually striking,
single-page memecoin websites. Produce one HTML/CSS/JS file with advanced
animations and a polished layout.

Required sections, top to bottom:
1) Navigation bar: IMAGE_PLACEHOLDER_LOGO on the left, links (Home,
   Tokenomics, Roadmap, FAQ) on the right.
2) Full-height hero with IMAGE_PLACEHOLDER_BG as its background, a bold
   headline "{coin_name}", a tagline referencing "{color_palette}" and an
   animated call-to-action button.
3) Tokenomics with sample supply and distribution figures.
4) Roadmap as a timeline or milestone cards.
5) FAQ as an animated accordion.
6) Footer with disclaimers and social links, anchored to the page bottom.

Use gradients, transitions and keyframe animations; be fully responsive;
keep JavaScript minimal. The project description is "{project_description}";
let it set the tone. Output only the document with the tokens
IMAGE_PLACEHOLDER_LOGO and IMAGE_PLACEHOLDER_BG left in place.
""",
    user_prompt="Generate the single-page site code now.",
    slots=[
        ImageSlot(
            token=LOGO_TOKEN,
            prompt='{project_description} coin logo for "{coin_name}", small, futuristic, eye-catching design',
            size="256x256",
        ),
        ImageSlot(
            token=BACKGROUND_TOKEN,
            prompt=(
                '{project_description} background for a hero section, referencing color palette '
                '"{color_palette}", futuristic, bold, eye-catching'
            ),
            size="256x256",
        ),
    ],
)

TEMPLATES: dict[str, SiteTemplate] = {
    LANDING_TEMPLATE.name: LANDING_TEMPLATE,
    CLASSIC_TEMPLATE.name: CLASSIC_TEMPLATE,
}


def get_template(name: str) -> SiteTemplate:
    try:
        return TEMPLATES[name]
    except KeyError:
        raise ValueError(
            f"Unknown site template '{name}'. Available: {', '.join(sorted(TEMPLATES))}"
        ) from None
