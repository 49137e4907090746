"""Tutorial catalog - personalized tutorial flows for each persona."""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from circl_walkthrough.core.exceptions import ConfigurationError
from circl_walkthrough.tutorial.views import (
    HighlightRect,
    Persona,
    TooltipAlignment,
    TutorialFlow,
    TutorialStep,
)

logger = logging.getLogger(__name__)

MINUTE_MS = 60 * 1000

TUTORIAL_ACCESS_VIEW = "tutorial_access"
COMMUNITY_WELCOME_VIEW = "community_welcome"


def _step(
    title: str,
    description: str,
    target_view: str,
    message: str,
    navigation_destination: Optional[str] = None,
    highlight: Optional[Tuple[float, float, float, float]] = None,
    alignment: TooltipAlignment = TooltipAlignment.CENTER,
    interactive: bool = False,
) -> TutorialStep:
    """Build a fresh step. `highlight` is (left, top, right, bottom)."""
    highlight_rect = None
    if highlight is not None:
        left, top, right, bottom = highlight
        highlight_rect = HighlightRect(left=left, top=top, right=right, bottom=bottom)

    return TutorialStep(
        title=title,
        description=description,
        target_view=target_view,
        message=message,
        navigation_destination=navigation_destination,
        highlight_rect=highlight_rect,
        tooltip_alignment=alignment,
        is_interactive=interactive,
    )


class TutorialCatalog:
    """
    Creates personalized tutorial flows for each persona.

    Every call builds new step and flow objects; nothing is cached or shared
    between callers. Each flow ends with the tutorial access step followed by
    the final community welcome step.
    """

    def __init__(self):
        self._builders: Dict[Persona, Callable[[], TutorialFlow]] = {
            Persona.ENTREPRENEUR: self.create_entrepreneur_tutorial,
            Persona.STUDENT: self.create_student_tutorial,
            Persona.STUDENT_ENTREPRENEUR: self.create_student_entrepreneur_tutorial,
            Persona.MENTOR: self.create_mentor_tutorial,
            Persona.INVESTOR: self.create_investor_tutorial,
            Persona.COMMUNITY_BUILDER: self.create_community_builder_tutorial,
        }
        # Personas without content of their own
        self._aliases: Dict[Persona, Persona] = {
            Persona.OTHER: Persona.COMMUNITY_BUILDER,
        }

    def flow_persona(self, persona: Persona) -> Persona:
        """Persona whose flow is shown to `persona`."""
        return self._aliases.get(persona, persona)

    def build_flow(self, persona: Persona) -> TutorialFlow:
        """
        Build the tutorial flow for a persona.

        Args:
            persona: Persona to build the flow for

        Returns:
            A new TutorialFlow

        Raises:
            ConfigurationError: If no builder is registered for the persona
        """
        builder = self._builders.get(self.flow_persona(persona))
        if builder is None:
            raise ConfigurationError(persona)

        flow = builder()
        logger.debug(f"Built flow '{flow.title}' with {flow.step_count} steps for {persona.value}")
        return flow

    @property
    def personas(self) -> List[Persona]:
        """Personas that have a flow of their own."""
        return list(self._builders)

    def _finish(
        self,
        persona: Persona,
        title: str,
        description: str,
        steps: List[TutorialStep],
        minutes: int,
    ) -> TutorialFlow:
        return TutorialFlow(
            persona=persona,
            title=title,
            description=description,
            steps=steps + self._common_steps(),
            estimated_duration=minutes * MINUTE_MS,
            is_required=True,
        )

    # Entrepreneur

    def create_entrepreneur_tutorial(self) -> TutorialFlow:
        steps = [
            _step(
                title="Welcome to Circl, Entrepreneur!",
                description="Let's show you how Circl can accelerate your entrepreneurial journey",
                target_view="main_navigation",
                message=(
                    "As an entrepreneur, you need tools to find co-founders, investors, mentors, "
                    "and grow your network. Circl is designed specifically for ambitious founders like you."
                ),
                navigation_destination="PageForum",
            ),
            _step(
                title="Your Entrepreneurial Bulletin Board",
                description="Share your updates and see what others in the community are posting",
                target_view="home_tab",
                message=(
                    "Think of this as your community bulletin board where entrepreneurs share wins, "
                    "challenges, insights, and opportunities. Post your own updates, celebrate milestones, "
                    "and engage with fellow founders' content to build meaningful connections."
                ),
                navigation_destination="PageUnifiedNetworking",
                highlight=(50, 100, 350, 500),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Find Co-Founders & Mentors",
                description="Connect with potential co-founders, experienced mentors, and strategic partners",
                target_view="network_tab",
                message=(
                    "This is your most powerful tool as an entrepreneur. Search for co-founders with "
                    "complementary skills, experienced mentors who've been where you're going, and industry "
                    "experts who can provide valuable guidance for your startup journey."
                ),
                navigation_destination="PageCircles",
                highlight=(80, 150, 330, 500),
                alignment=TooltipAlignment.TOP,
                interactive=True,
            ),
            _step(
                title="Run Your Business Through Circles",
                description="Use Circles as your business management and collaboration platform",
                target_view="circles_tab",
                message=(
                    "Create a circle to run your business operations. Manage tasks, track KPIs, centralize "
                    "team communication, and coordinate with co-founders. It's your startup's command "
                    "center in one organized space."
                ),
                highlight=(50, 100, 350, 450),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Join Entrepreneurial Circles",
                description="Connect with like-minded founders and industry-specific groups",
                target_view="circles_tab",
                message=(
                    "Join circles based on your industry, business model, or stage of growth. Share "
                    "challenges, celebrate wins, and learn from other entrepreneurs facing similar journeys."
                ),
                highlight=(160, 150, 410, 450),
                alignment=TooltipAlignment.TOP,
            ),
            _step(
                title="Create or Join Strategic Circles",
                description="Build communities around your startup or join investor/advisor groups",
                target_view="circles_tab",
                message=(
                    "Create a circle for your startup team and advisors, or join exclusive investor "
                    "networks and accelerator groups. Use circles strategically to build your startup's "
                    "ecosystem."
                ),
                navigation_destination="PageBusinessProfile",
                highlight=(100, 200, 380, 450),
                alignment=TooltipAlignment.LEADING,
            ),
            _step(
                title="Showcase Your Venture",
                description="Create a compelling business profile to attract investors and co-founders",
                target_view="business_profile_tab",
                message=(
                    "Your business profile is crucial for attracting investors and co-founders. Share your "
                    "startup's mission, traction, funding needs, and what roles you're looking to fill."
                ),
                navigation_destination="PageEntrepreneurResources",
                highlight=(30, 120, 370, 470),
                alignment=TooltipAlignment.TOP,
            ),
            _step(
                title="Access Startup Services",
                description="Find lawyers, accountants, and other professionals for your business",
                target_view="professional_services",
                message=(
                    "Access pre-vetted professionals offering startup-specific services like incorporation, "
                    "accounting, marketing, and legal advice. Many offer special rates for early-stage companies."
                ),
                navigation_destination="PageMessages",
                highlight=(50, 200, 350, 400),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Conversate, Collaborate, Pass Networks, and Sell",
                description="Use messages for deep connections and business opportunities",
                target_view="messages_tab",
                message=(
                    "Use messages to have meaningful conversations with mentors, collaborate with co-founders "
                    "and team members, pass valuable network connections to others, and engage with potential "
                    "clients or customers. This is where relationships turn into business opportunities."
                ),
                navigation_destination="PageForum",
                highlight=(60, 100, 340, 500),
                alignment=TooltipAlignment.TRAILING,
            ),
            _step(
                title="Entrepreneur Success Tips",
                description="Make the most of Circl for your startup journey",
                target_view="success_tips",
                message=(
                    "Pro tips: Update your business profile regularly, engage authentically in circles, be "
                    "specific about what you're looking for, and always follow up on connections. "
                    "Consistency builds trust!"
                ),
            ),
        ]

        return self._finish(
            Persona.ENTREPRENEUR,
            title="Entrepreneur's Guide to Circl",
            description="Learn how to leverage Circl to find co-founders, investors, and grow your startup",
            steps=steps,
            minutes=10,
        )

    # Student

    def create_student_tutorial(self) -> TutorialFlow:
        steps = [
            _step(
                title="Welcome to Circl, Student!",
                description="Let's show you how to make the most of your learning journey",
                target_view="main_navigation",
                message=(
                    "As a student, Circl connects you with experienced entrepreneurs, mentors, and peers. "
                    "Learn from those who've achieved what you're working toward."
                ),
                navigation_destination="PageForum",
            ),
            _step(
                title="Your Learning Feed",
                description="Discover insights and lessons from experienced professionals",
                target_view="home_tab",
                message=(
                    "See posts from entrepreneurs sharing real-world lessons, industry insights, and career "
                    "advice. Learn from their successes and mistakes."
                ),
                navigation_destination="PageUnifiedNetworking",
                highlight=(50, 100, 350, 500),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Find Mentors & Industry Professionals",
                description="Connect with people who can guide your career path",
                target_view="network_tab",
                message=(
                    "Search for mentors in your field of interest, connect with professionals at companies "
                    "you admire, and build relationships that can shape your career."
                ),
                navigation_destination="PageCircles",
                highlight=(80, 150, 330, 500),
                alignment=TooltipAlignment.TOP,
                interactive=True,
            ),
            _step(
                title="Join Student & Learning Circles",
                description="Connect with other students and study groups",
                target_view="circles_tab",
                message=(
                    "Join circles focused on your field of study, participate in peer learning groups, and "
                    "connect with students from other universities."
                ),
                navigation_destination="PageMessages",
                highlight=(50, 100, 350, 450),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Direct Mentorship Conversations",
                description="Message mentors and build meaningful connections",
                target_view="messages_tab",
                message=(
                    "Reach out to mentors for advice, ask questions about career paths, and build "
                    "relationships that extend beyond your time in school."
                ),
                navigation_destination="PageForum",
                highlight=(60, 100, 340, 500),
                alignment=TooltipAlignment.TRAILING,
            ),
            _step(
                title="Student Success Tips",
                description="Make the most of your Circl experience",
                target_view="success_tips",
                message=(
                    "Pro tips: Be curious and ask thoughtful questions, share your own learning journey, be "
                    "respectful of mentors' time, and always follow up with gratitude."
                ),
            ),
        ]

        return self._finish(
            Persona.STUDENT,
            title="Student's Guide to Circl",
            description="Learn how to find mentors and accelerate your learning",
            steps=steps,
            minutes=8,
        )

    # Student entrepreneur

    def create_student_entrepreneur_tutorial(self) -> TutorialFlow:
        steps = [
            _step(
                title="Welcome, Student Entrepreneur!",
                description="You're building while learning - let's show you how Circl can help",
                target_view="main_navigation",
                message=(
                    "As a student entrepreneur, you have unique needs - finding co-founders, learning from "
                    "experienced founders, and balancing school with building. Circl is here to support both "
                    "sides of your journey."
                ),
                navigation_destination="PageForum",
            ),
            _step(
                title="Your Dual-Purpose Feed",
                description="Learn and share as both student and founder",
                target_view="home_tab",
                message=(
                    "See posts from both experienced entrepreneurs and fellow student founders. Learn from "
                    "their journeys and share your own progress."
                ),
                navigation_destination="PageUnifiedNetworking",
                highlight=(50, 100, 350, 500),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Find Co-Founders & Mentors",
                description="Connect with fellow student entrepreneurs and experienced mentors",
                target_view="network_tab",
                message=(
                    "Search for potential co-founders among other students, find mentors who've been student "
                    "entrepreneurs, and connect with investors interested in student startups."
                ),
                navigation_destination="PageCircles",
                highlight=(80, 150, 330, 500),
                alignment=TooltipAlignment.TOP,
                interactive=True,
            ),
            _step(
                title="Manage Your Startup",
                description="Use Circles to organize your student venture",
                target_view="circles_tab",
                message=(
                    "Create a circle for your startup team, join student entrepreneur communities, and "
                    "participate in university innovation circles."
                ),
                navigation_destination="PageBusinessProfile",
                highlight=(50, 100, 350, 450),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Showcase Your Student Venture",
                description="Create a profile for your student startup",
                target_view="business_profile_tab",
                message=(
                    "Share your student startup's mission, what you're building, and what kind of support "
                    "you're looking for - whether it's co-founders, mentors, or early customers."
                ),
                navigation_destination="PageMessages",
                highlight=(30, 120, 370, 470),
                alignment=TooltipAlignment.TOP,
            ),
            _step(
                title="Student Entrepreneur Success Tips",
                description="Balance learning and building effectively",
                target_view="success_tips",
                message=(
                    "Pro tips: Leverage your university resources, connect with other student founders, "
                    "don't be afraid to ask for help, and remember that being a student entrepreneur is a "
                    "unique advantage - you have time to experiment and learn!"
                ),
            ),
        ]

        return self._finish(
            Persona.STUDENT_ENTREPRENEUR,
            title="Student Entrepreneur's Guide to Circl",
            description="Learn how to build your startup while excelling in school",
            steps=steps,
            minutes=9,
        )

    # Mentor

    def create_mentor_tutorial(self) -> TutorialFlow:
        steps = [
            _step(
                title="Welcome, Mentor!",
                description="Your experience can change lives - let's show you how to share it",
                target_view="main_navigation",
                message=(
                    "As a mentor, you have valuable knowledge and experience to share. Circl makes it easy "
                    "to connect with aspiring entrepreneurs and students who need your guidance."
                ),
                navigation_destination="PageForum",
            ),
            _step(
                title="Share Your Knowledge",
                description="Post insights, lessons, and advice for the community",
                target_view="home_tab",
                message=(
                    "Share posts about lessons you've learned, industry insights, career advice, and "
                    "practical tips. Your experience is valuable to many people here."
                ),
                navigation_destination="PageUnifiedNetworking",
                highlight=(50, 100, 350, 500),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Find Mentees",
                description="Connect with entrepreneurs and students who need your guidance",
                target_view="network_tab",
                message=(
                    "Browse profiles of entrepreneurs and students looking for mentors. Filter by industry, "
                    "experience level, and specific needs to find great matches."
                ),
                navigation_destination="PageCircles",
                highlight=(80, 150, 330, 500),
                alignment=TooltipAlignment.TOP,
                interactive=True,
            ),
            _step(
                title="Lead Mentor Circles",
                description="Create or join circles focused on mentorship and learning",
                target_view="circles_tab",
                message=(
                    "Create circles around your areas of expertise, lead group mentorship sessions, and "
                    "participate in industry-specific knowledge sharing."
                ),
                navigation_destination="PageMessages",
                highlight=(50, 100, 350, 450),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="One-on-One Mentorship",
                description="Have meaningful conversations with your mentees",
                target_view="messages_tab",
                message=(
                    "Use messages for deeper mentorship conversations, provide personalized advice, and "
                    "build lasting relationships with those you're guiding."
                ),
                navigation_destination="PageForum",
                highlight=(60, 100, 340, 500),
                alignment=TooltipAlignment.TRAILING,
            ),
            _step(
                title="Mentor Success Tips",
                description="Make the biggest impact as a mentor",
                target_view="success_tips",
                message=(
                    "Pro tips: Share specific, actionable advice, be encouraging but honest, make yourself "
                    "available regularly, and remember that mentorship is a two-way street - you'll learn too!"
                ),
            ),
        ]

        return self._finish(
            Persona.MENTOR,
            title="Mentor's Guide to Circl",
            description="Learn how to share your knowledge and guide the next generation",
            steps=steps,
            minutes=8,
        )

    # Investor

    def create_investor_tutorial(self) -> TutorialFlow:
        steps = [
            _step(
                title="Welcome, Investor!",
                description="Discover your next investment opportunity",
                target_view="main_navigation",
                message=(
                    "As an investor, Circl gives you direct access to founders, deal flow, and startup "
                    "communities. Find investment opportunities and connect with entrepreneurs before "
                    "everyone else."
                ),
                navigation_destination="PageForum",
            ),
            _step(
                title="Discover Deal Flow",
                description="See what entrepreneurs are building and sharing",
                target_view="home_tab",
                message=(
                    "The feed shows you real-time updates from founders - product launches, traction "
                    "milestones, and fundraising announcements. Spot opportunities early."
                ),
                navigation_destination="PageUnifiedNetworking",
                highlight=(50, 100, 350, 500),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Find Investment Opportunities",
                description="Search for startups that match your investment thesis",
                target_view="network_tab",
                message=(
                    "Browse entrepreneur profiles, filter by industry and stage, review business profiles, "
                    "and identify startups seeking investment."
                ),
                navigation_destination="PageCircles",
                highlight=(80, 150, 330, 500),
                alignment=TooltipAlignment.TOP,
                interactive=True,
            ),
            _step(
                title="Join Investor Circles",
                description="Network with other investors and syndicate deals",
                target_view="circles_tab",
                message=(
                    "Join investor circles to share deal flow, co-invest with other angels or VCs, and "
                    "participate in industry-specific investment groups."
                ),
                navigation_destination="PageMessages",
                highlight=(50, 100, 350, 450),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Direct Founder Access",
                description="Message founders directly to learn about their ventures",
                target_view="messages_tab",
                message=(
                    "Have direct conversations with founders, ask detailed questions about their business, "
                    "and build relationships before making investment decisions."
                ),
                navigation_destination="PageForum",
                highlight=(60, 100, 340, 500),
                alignment=TooltipAlignment.TRAILING,
            ),
            _step(
                title="Investor Success Tips",
                description="Make the most of your investor experience",
                target_view="success_tips",
                message=(
                    "Pro tips: Be clear about your investment criteria, provide value beyond capital, build "
                    "relationships before deals, and engage authentically with the community."
                ),
            ),
        ]

        return self._finish(
            Persona.INVESTOR,
            title="Investor's Guide to Circl",
            description="Learn how to discover and connect with investment opportunities",
            steps=steps,
            minutes=8,
        )

    # Community builder (also used for OTHER)

    def create_community_builder_tutorial(self) -> TutorialFlow:
        steps = [
            _step(
                title="Welcome to Circl!",
                description="Let's show you around the community",
                target_view="main_navigation",
                message=(
                    "Circl is a community of entrepreneurs, students, mentors, and innovators. Let's show "
                    "you how to connect and engage with this amazing network."
                ),
                navigation_destination="PageForum",
            ),
            _step(
                title="Your Community Feed",
                description="See what the community is sharing and discussing",
                target_view="home_tab",
                message=(
                    "This is your window into the community. See updates, achievements, questions, and "
                    "opportunities from members across the network."
                ),
                navigation_destination="PageUnifiedNetworking",
                highlight=(50, 100, 350, 500),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Discover Your Network",
                description="Find and connect with interesting people",
                target_view="network_tab",
                message=(
                    "Browse profiles, discover people with shared interests, and build your professional "
                    "network one authentic connection at a time."
                ),
                navigation_destination="PageCircles",
                highlight=(80, 150, 330, 500),
                alignment=TooltipAlignment.TOP,
                interactive=True,
            ),
            _step(
                title="Join Circles",
                description="Find your communities within the community",
                target_view="circles_tab",
                message=(
                    "Circles are focused communities around industries, interests, or goals. Join circles "
                    "that align with your interests and participate actively."
                ),
                navigation_destination="PageMessages",
                highlight=(50, 100, 350, 450),
                alignment=TooltipAlignment.BOTTOM,
            ),
            _step(
                title="Connect & Collaborate",
                description="Have meaningful conversations with your connections",
                target_view="messages_tab",
                message=(
                    "Use messages to deepen relationships, collaborate on ideas, share resources, and build "
                    "genuine connections."
                ),
                navigation_destination="PageForum",
                highlight=(60, 100, 340, 500),
                alignment=TooltipAlignment.TRAILING,
            ),
            _step(
                title="Community Success Tips",
                description="Make the most of your Circl experience",
                target_view="success_tips",
                message=(
                    "Pro tips: Engage authentically, give before you ask, be supportive of others' journeys, "
                    "and remember that every connection is an opportunity to learn and grow."
                ),
            ),
        ]

        return self._finish(
            Persona.COMMUNITY_BUILDER,
            title="Welcome to Circl",
            description="Learn how to connect and engage with the community",
            steps=steps,
            minutes=7,
        )

    # Common steps

    def _common_steps(self) -> List[TutorialStep]:
        """Closing steps shown to every persona, in this order."""
        return [
            _step(
                title="Access This Tutorial Anytime",
                description="You can always revisit this tutorial from Settings",
                target_view=TUTORIAL_ACCESS_VIEW,
                message=(
                    "If you ever need a refresher, go to Settings > Tutorial & Help to restart this tutorial "
                    "or explore different user type tutorials. We're here to help you succeed!"
                ),
            ),
            _step(
                title="Welcome to the Circl Community!",
                description="You're all set to start your journey",
                target_view=COMMUNITY_WELCOME_VIEW,
                message=(
                    "You've completed the tutorial! Now it's time to dive in, make connections, and start "
                    "building. Remember, success on Circl comes from authentic engagement and giving value to "
                    "others. Welcome to the community!"
                ),
            ),
        ]

