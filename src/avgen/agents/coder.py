"""Scene code generation agent."""

import re
from dataclasses import dataclass
from typing import Optional

from ..config import config
from ..errors import DuplicateEntryPointError, EmptyGenerationError, MissingEntryPointError
from .base import BaseAgent

FENCE_PATTERN = re.compile(r"```(?:python|py)?")

EXAMPLES = '''Example 1 - Simple shape:
from manim import *

class {scene}(Scene):
    def construct(self):
        circle = Circle(color=BLUE)
        self.play(Create(circle))
        self.wait(2)

Example 2 - Transform:
from manim import *

class {scene}(Scene):
    def construct(self):
        circle = Circle(color=BLUE)
        square = Square(color=RED)
        self.play(Create(circle))
        self.wait(1)
        self.play(Transform(circle, square))
        self.wait(2)

Example 3 - 3D:
from manim import *

class {scene}(ThreeDScene):
    def construct(self):
        cube = Cube(color=BLUE)
        self.play(Create(cube))
        self.play(Rotate(cube, angle=PI, axis=UP))
        self.wait(2)

Example 4 - Text:
from manim import *

class {scene}(Scene):
    def construct(self):
        text = Text("Hello Manim")
        self.play(Write(text))
        self.wait(2)'''

INITIAL_TEMPLATE = """Write Manim Community Edition code for ONE scene.

REQUIREMENTS:
- Start with: from manim import *
- Class name MUST be: {scene}
- Subclass Scene (or ThreeDScene for 3D)
- Implement the construct(self) method
- Use self.play() for ALL animations
- End with self.wait(2) so the result stays visible
- Keep the code SIMPLE, avoid complex logic
- NO if __name__ == "__main__" block
- NO command-line execution code

MANIM BASICS:
- Objects: Circle(), Square(), Text(), Dot(), Line(), Triangle()
- 3D: Cube(), Sphere(), ThreeDAxes() (use ThreeDScene)
- Animations: Create(), Write(), FadeIn(), FadeOut(), Transform(), Rotate(), GrowFromCenter()
- Colors: RED, BLUE, GREEN, YELLOW, PURPLE, ORANGE, WHITE
- Group objects with VGroup()
- Simple movement: self.play(obj.animate.shift(RIGHT))

EXAMPLES:

{examples}

NOW CREATE CODE FOR: "{prompt}"

Return ONLY the Python code, nothing else."""

CORRECTIVE_TEMPLATE = """Fix this Manim Community Edition code. Return ONLY Python code for a single scene class.

REQUIREMENTS:
- Must start with: from manim import *
- Class name MUST be {scene}
- Implement construct(self)
- Do NOT include if __name__ == "__main__" or any CLI running code
- Use self.play() for animations
- Use self.wait() to control timing (minimum 1 second)
- Keep animations SIMPLE and focused

Original request: "{prompt}"

Previous code:
{code}

Error to fix:
{error}

Task: Fix only this error while keeping the code simple and working. End with self.wait()."""


def build_scene_prompt(
    prompt: str,
    attempt: int = 1,
    previous_code: Optional[str] = None,
    previous_error: Optional[str] = None,
    scene_name: str = "GeneratedScene",
) -> str:
    """Build the generation prompt for an attempt.

    The first attempt (or any attempt without a prior error) gets the
    instructional prompt with examples; later attempts get a corrective
    prompt embedding the previous code and its exact error text.

    Args:
        prompt: The user's request.
        attempt: 1-based attempt number.
        previous_code: Source produced by the previous attempt.
        previous_error: Failure text of the previous attempt.
        scene_name: Required scene class name.

    Returns:
        The full prompt text.
    """
    if attempt > 1 and previous_error is not None:
        return CORRECTIVE_TEMPLATE.format(
            scene=scene_name,
            prompt=prompt,
            code=previous_code or "",
            error=previous_error,
        )
    return INITIAL_TEMPLATE.format(
        scene=scene_name,
        prompt=prompt,
        examples=EXAMPLES.format(scene=scene_name),
    )


def clean_code(raw: str) -> str:
    """Strip markdown code fences and surrounding whitespace."""
    return FENCE_PATTERN.sub("", raw).strip()


def validate_code(code: str, scene_name: str = "GeneratedScene") -> str:
    """Check that code declares the scene class exactly once.

    Raises:
        EmptyGenerationError: If code is empty.
        MissingEntryPointError: If the class declaration is absent.
        DuplicateEntryPointError: If it is declared more than once.
    """
    if not code:
        raise EmptyGenerationError("Model returned empty code", code=code)

    declarations = re.findall(rf"class\s+{re.escape(scene_name)}\s*\(", code)
    if not declarations:
        raise MissingEntryPointError(
            f"Generated code does not declare class {scene_name}", code=code
        )
    if len(declarations) > 1:
        raise DuplicateEntryPointError(
            f"Generated code declares class {scene_name} {len(declarations)} times", code=code
        )
    return code


@dataclass
class CodeRequest:
    """Input data for the scene code agent."""

    prompt: str
    attempt: int = 1
    previous_code: Optional[str] = None
    previous_error: Optional[str] = None


class SceneCodeAgent(BaseAgent[CodeRequest, str]):
    """Agent that writes (and repairs) a single Manim scene.

    Performs exactly one model call per request; retrying is up to the caller.
    """

    temperature = 0.4

    def __init__(self, *args, scene_name: Optional[str] = None, **kwargs) -> None:
        self._scene_name = scene_name or config.scene_name
        super().__init__(*args, **kwargs)

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "SceneCodeAgent"

    @property
    def system_prompt(self) -> str:
        return (
            "You are an expert Manim Community Edition programmer. "
            "You reply with plain Python source code only."
        )

    @property
    def scene_name(self) -> str:
        return self._scene_name

    def run(self, input_data: CodeRequest) -> str:
        """Generate validated scene code.

        Raises:
            GenerationError: If the cleaned output fails validation.
        """
        corrective = input_data.attempt > 1 and input_data.previous_error is not None
        self._logger.info(
            f"Generating scene code (attempt {input_data.attempt}"
            f"{', corrective' if corrective else ''})"
        )

        prompt = build_scene_prompt(
            input_data.prompt,
            attempt=input_data.attempt,
            previous_code=input_data.previous_code,
            previous_error=input_data.previous_error,
            scene_name=self._scene_name,
        )
        response = self._complete(prompt)
        return validate_code(clean_code(response), self._scene_name)

    def generate(
        self,
        prompt: str,
        previous_code: Optional[str] = None,
        previous_error: Optional[str] = None,
        attempt: Optional[int] = None,
    ) -> str:
        """Generate scene code, correcting the previous attempt if given."""
        if attempt is None:
            attempt = 2 if previous_error is not None else 1
        return self.run(CodeRequest(
            prompt=prompt,
            attempt=attempt,
            previous_code=previous_code,
            previous_error=previous_error,
        ))
