import pytest

from a11y_auditor.checks import (
    AriaCheck,
    ContrastCheck,
    ContrastCombination,
    FocusOrderCheck,
    FocusStyleCheck,
    ImageCheck,
    KeyboardCheck,
    StructureCheck,
    TouchTargetCheck,
    VisionSimulationCheck,
)
from a11y_auditor.checks.focus_order import tab_sequence
from a11y_auditor.findings import Category, Severity

from builders import button, link, node, page


def types(result):
    return [f.type for f in result.findings]


class TestStructureCheck:

    def test_well_formed_page(self, options):
        snapshot = page(node('nav'), node('main'), node('h1', parent=1, text='Title'))
        assert StructureCheck().run(snapshot, options).findings == ()

    def test_bare_page(self, options):
        result = StructureCheck().run(page(node('div')), options)
        by_type = {f.type: f for f in result.findings}
        assert by_type['missing_h1'].severity == Severity.CRITICAL
        assert by_type['missing_main'].severity == Severity.CRITICAL
        assert by_type['missing_nav'].severity == Severity.MEDIUM

    def test_landmark_roles_count(self, options):
        snapshot = page(
            node('div', attrs={'role': 'main'}),
            node('div', attrs={'role': 'navigation'}),
            node('h1', text='Title'),
        )
        assert StructureCheck().run(snapshot, options).findings == ()

    def test_skipped_heading_level_is_low(self, options):
        snapshot = page(
            node('nav'), node('main'),
            node('h1', text='Title'), node('h3', text='Deep'),
        )
        result = StructureCheck().run(snapshot, options)
        assert types(result) == ['heading_hierarchy']
        finding = result.findings[0]
        assert finding.severity == Severity.LOW
        assert finding.context.previous_level == 1
        assert finding.context.level == 3

    def test_data_lists_headings_and_landmarks(self, options):
        snapshot = page(node('main'), node('h1', parent=0, text='Title'))
        data = StructureCheck().run(snapshot, options).data
        assert [h['level'] for h in data['headings']] == ['h1']
        assert [lm['tag'] for lm in data['landmarks']] == ['main']


class TestContrastCheck:

    def test_low_contrast_text_is_critical(self, options):
        snapshot = page(node('p', text='Faint', style={'color': 'rgb(153, 153, 153)'}))
        result = ContrastCheck().run(snapshot, options)
        assert types(result) == ['contrast_failure']
        finding = result.findings[0]
        assert finding.severity == Severity.CRITICAL
        assert finding.category == Category.COLOR_CONTRAST
        assert finding.message == "Insufficient contrast ratio: 2.85:1 (required: 4.5:1)"
        assert finding.recommendation == "Improve color contrast to meet WCAG AA standards"
        assert finding.context.background_color == 'rgb(255, 255, 255)'
        assert result.data['failures'] == 1

    def test_passing_text_is_counted(self, options):
        snapshot = page(node('p', text='Readable', style={'color': 'rgb(0, 0, 0)'}))
        result = ContrastCheck().run(snapshot, options)
        assert result.findings == ()
        assert result.data['passes'] == 1
        combination = result.data['combinations'][0]
        assert combination.status == 'PASS'
        assert combination.contrast_ratio == 21.0

    def test_aaa_is_stricter(self, options, aaa_options):
        snapshot = page(node('p', text='Grey', style={'color': 'rgb(118, 118, 118)'}))
        assert ContrastCheck().run(snapshot, options).findings == ()
        assert types(ContrastCheck().run(snapshot, aaa_options)) == ['contrast_failure']

    def test_large_bold_text_uses_lower_threshold(self, options):
        snapshot = page(node('h2', text='Heading', style={
            'color': 'rgb(136, 136, 136)', 'font-size': '19px', 'font-weight': '700',
        }))
        result = ContrastCheck().run(snapshot, options)
        assert result.findings == ()
        assert result.data['combinations'][0].is_large_text

    def test_combinations_are_deduplicated(self, options):
        style = {'color': 'rgb(153, 153, 153)'}
        snapshot = page(
            node('p', text='One', style=style),
            node('p', text='Two', style=style),
            node('li', text='Three', style=style),
        )
        result = ContrastCheck().run(snapshot, options)
        assert len(result.data['combinations']) == 1
        assert len(result.findings) == 1

    def test_unparseable_color_is_an_error_combination(self, options):
        snapshot = page(node('p', text='Themed', style={'color': 'var(--text)'}))
        result = ContrastCheck().run(snapshot, options)
        assert result.findings == ()
        assert result.data['errors'] == 1
        assert result.data['combinations'][0].status == 'ERROR'

    def test_transparent_text_is_skipped(self, options):
        snapshot = page(node('p', text='Ghost', style={'color': 'rgba(0, 0, 0, 0)'}))
        assert ContrastCheck().run(snapshot, options).data['combinations'] == []

    def test_translucent_text_is_composited(self, options):
        snapshot = page(node('p', text='Soft', style={'color': 'rgba(0, 0, 0, 0.5)'}))
        result = ContrastCheck().run(snapshot, options)
        assert result.findings[0].context.text_color == 'rgb(128, 128, 128)'

    def test_hidden_and_wrapper_elements_are_skipped(self, options):
        snapshot = page(
            node('div', text='Wrapper', direct_text=''),
            node('p', text='Hidden', style={'color': 'rgb(200, 200, 200)', 'display': 'none'}),
            node('section', text='Not a text tag', style={'color': 'rgb(200, 200, 200)'}),
        )
        assert ContrastCheck().run(snapshot, options).data['combinations'] == []

    def test_text_over_image_goes_to_manual_review(self, options):
        snapshot = page(
            node('section', style={'background-image': 'url("hero.jpg")'}),
            node('p', parent=0, text='Caption', style={'color': 'rgb(255, 255, 255)'}),
            node('p', parent=0, text='More', style={'color': 'rgb(255, 255, 255)'}),
        )
        result = ContrastCheck().run(snapshot, options)
        assert types(result) == ['contrast_manual_review']
        finding = result.findings[0]
        assert finding.category == Category.MANUAL_REVIEW
        assert finding.severity == Severity.HIGH
        assert finding.context.image_selector == snapshot.selector(snapshot.node(2))
        assert result.data['combinations'] == []

    def test_text_over_dark_overlay_is_scored(self, options):
        snapshot = page(
            node('section', style={'background-image': 'url("hero.jpg")'},
                 before={'content': '""', 'background-color': 'rgba(0, 0, 0, 0.6)'}),
            node('h1', parent=0, text='Welcome', style={'color': 'rgb(255, 255, 255)'}),
        )
        result = ContrastCheck().run(snapshot, options)
        assert result.findings == ()
        combination = result.data['combinations'][0]
        assert combination.background_rgb == (0, 0, 0)
        assert combination.status == 'PASS'


class TestVisionSimulationCheck:

    @staticmethod
    def combination(text_rgb, background_rgb, selector='p'):
        return ContrastCombination(
            text_color='rgb(%d, %d, %d)' % text_rgb,
            background_color='rgb(%d, %d, %d)' % background_rgb,
            font_size=16.0,
            font_weight='400',
            sample_text='Sample',
            selector=selector,
            status='FAIL',
            text_rgb=text_rgb,
            background_rgb=background_rgb,
        )

    def test_equal_lightness_pair_is_flagged(self, options):
        result = VisionSimulationCheck().run(
            page(), options, combinations=[self.combination((255, 0, 0), (0, 130, 0))]
        )
        assert types(result) == ['color_vision_deficiency']
        finding = result.findings[0]
        assert finding.severity == Severity.HIGH
        assert 'achromatopsia' in finding.context.problematic_types
        assert finding.context.max_impact_percentage == 100
        assert finding.selector == 'p'

    def test_black_on_white_is_fine(self, options):
        result = VisionSimulationCheck().run(
            page(), options, combinations=[self.combination((0, 0, 0), (255, 255, 255))]
        )
        assert result.findings == ()
        assert result.data['reports'][0]['isAccessible']

    def test_pairs_are_tested_once(self, options):
        combinations = [
            self.combination((255, 0, 0), (0, 130, 0), selector='p.a'),
            self.combination((255, 0, 0), (0, 130, 0), selector='p.b'),
        ]
        result = VisionSimulationCheck().run(page(), options, combinations=combinations)
        assert len(result.data['reports']) == 1
        assert len(result.findings) == 1

    def test_error_combinations_are_ignored(self, options):
        broken = ContrastCombination(
            text_color='var(--x)', background_color='', font_size=16.0,
            font_weight='400', sample_text='', selector='p', status='ERROR',
        )
        result = VisionSimulationCheck().run(page(), options, combinations=[broken])
        assert result.data['reports'] == []


class TestAriaCheck:

    def test_button_without_name(self, options):
        result = AriaCheck().run(page(button(text='')), options)
        assert types(result) == ['missing_accessible_name']
        assert result.findings[0].message == "BUTTON element without accessible name"
        assert result.findings[0].severity == Severity.MEDIUM

    @pytest.mark.parametrize('attrs', [
        {'aria-label': 'Close'},
        {'aria-labelledby': 'title'},
        {'title': 'Close dialog'},
    ])
    def test_named_by_attribute(self, options, attrs):
        snapshot = page(node('h2', attrs={'id': 'title'}), button(text='', attrs=attrs))
        assert 'missing_accessible_name' not in types(AriaCheck().run(snapshot, options))

    def test_label_for_names_input(self, options):
        snapshot = page(
            node('label', text='Email', attrs={'for': 'email'}),
            node('input', attrs={'id': 'email', 'type': 'email'}, interactive=True, focusable=True),
        )
        assert AriaCheck().run(snapshot, options).findings == ()

    def test_wrapping_label_names_input(self, options):
        snapshot = page(
            node('label', text='Subscribe'),
            node('input', parent=0, attrs={'type': 'checkbox'}, interactive=True, focusable=True),
        )
        assert AriaCheck().run(snapshot, options).findings == ()

    def test_submit_value_and_image_alt(self, options):
        snapshot = page(
            node('input', attrs={'type': 'submit', 'value': 'Send'}, interactive=True),
            node('input', attrs={'type': 'image', 'alt': 'Search'}, interactive=True),
            link(text='', href='/home'),
            node('img', parent=2, attrs={'alt': 'Home'}),
        )
        assert AriaCheck().run(snapshot, options).findings == ()

    def test_hidden_inputs_are_skipped(self, options):
        snapshot = page(
            node('input', attrs={'type': 'hidden', 'name': 'token'}, interactive=True),
            button(text='', attrs={'aria-hidden': 'true'}),
        )
        assert AriaCheck().run(snapshot, options).findings == ()

    def test_placeholder_is_not_a_label(self, options):
        snapshot = page(
            node('input', attrs={'type': 'search', 'placeholder': 'Search products'},
                 interactive=True, focusable=True),
        )
        result = AriaCheck().run(snapshot, options)
        assert types(result) == ['placeholder_as_label']
        assert result.findings[0].severity == Severity.LOW
        assert result.findings[0].context.value == 'Search products'

    def test_labelled_input_with_placeholder_passes(self, options):
        snapshot = page(
            node('input', attrs={'type': 'email', 'placeholder': 'you@example.com',
                                 'aria-label': 'Email'}, interactive=True, focusable=True),
        )
        assert AriaCheck().run(snapshot, options).findings == ()

    def test_invalid_role(self, options):
        snapshot = page(node('div', attrs={'role': 'buton'}), node('div', attrs={'role': 'foo button'}))
        result = AriaCheck().run(snapshot, options)
        assert types(result) == ['invalid_aria_role']
        assert result.findings[0].context.value == 'buton'

    def test_missing_reference(self, options):
        snapshot = page(node('p', text='Hint', attrs={'aria-describedby': 'hint nowhere'}),
                        node('span', attrs={'id': 'hint'}))
        result = AriaCheck().run(snapshot, options)
        assert types(result) == ['aria_reference_missing']
        assert result.findings[0].context.missing_ids == ('nowhere',)

    def test_dynamic_references(self, options):
        snapshot = page(
            node('p', attrs={'aria-describedby': 'tip-dynamic-3'}),
            node('p', attrs={'aria-labelledby': 'temp-label'}),
        )
        result = AriaCheck().run(snapshot, options)
        assert types(result) == ['aria_reference_dynamic']
        assert result.findings[0].severity == Severity.LOW

    def test_expanded_without_controls(self, options):
        snapshot = page(
            button(text='Menu', attrs={'aria-expanded': 'false'}),
            button(text='More', attrs={'aria-expanded': 'true', 'aria-controls': 'more'}),
        )
        result = AriaCheck().run(snapshot, options)
        assert types(result) == ['aria_expanded_without_controls']
        assert len(result.data['elements']) == 2


class TestKeyboardCheck:

    def test_missing_skip_link(self, options):
        result = KeyboardCheck().run(page(link(text='Home', href='/')), options)
        assert types(result) == ['missing_skip_links']
        assert result.findings[0].message == "No skip links found"
        assert len(result.data['focusable_elements']) == 1

    @pytest.mark.parametrize('href', ['#main', '#content', '#navigation', '#search'])
    def test_skip_link_targets(self, options, href):
        result = KeyboardCheck().run(page(link(text='Skip', href=href)), options)
        assert result.findings == ()
        assert result.data['skip_links'][0]['href'] == href

    def test_skip_link_class_on_ancestor(self, options):
        snapshot = page(node('div', attrs={'class': 'skip-link'}), link(parent=0, href='#top'))
        assert KeyboardCheck().run(snapshot, options).findings == ()


class TestImageCheck:

    def test_missing_alt_is_critical(self, options):
        snapshot = page(node('img', attrs={'src': '/logo.png'}))
        result = ImageCheck().run(snapshot, options)
        assert types(result) == ['missing_alt_text']
        finding = result.findings[0]
        assert finding.severity == Severity.CRITICAL
        assert finding.message == "Image missing alt text"
        assert finding.context.src == '/logo.png'

    @pytest.mark.parametrize('attrs', [
        {'alt': ''},
        {'alt': 'Company logo'},
        {'aria-label': 'Company logo'},
        {'role': 'presentation'},
        {'role': 'none'},
    ])
    def test_alternatives_and_decorative_images(self, options, attrs):
        snapshot = page(node('img', attrs=dict(attrs, src='/logo.png')))
        result = ImageCheck().run(snapshot, options)
        assert result.findings == ()
        assert len(result.data['images']) == 1


class TestFocusStyleCheck:

    NO_OUTLINE = {'outline-style': 'none', 'outline-width': '0px', 'background-color': 'rgb(255, 255, 255)'}

    def test_unchanged_style_is_flagged(self, options):
        snapshot = page(button(style=self.NO_OUTLINE, focus_style=dict(self.NO_OUTLINE)))
        result = FocusStyleCheck().run(snapshot, options)
        assert types(result) == ['missing_focus_style']
        assert result.findings[0].message == "Element lacks visible focus indicator"

    def test_focus_outline(self, options):
        focus = dict(self.NO_OUTLINE, **{'outline-style': 'solid', 'outline-width': '2px'})
        snapshot = page(button(style=self.NO_OUTLINE, focus_style=focus))
        assert FocusStyleCheck().run(snapshot, options).findings == ()

    def test_background_change(self, options):
        focus = dict(self.NO_OUTLINE, **{'background-color': 'rgb(255, 255, 0)'})
        snapshot = page(button(style=self.NO_OUTLINE, focus_style=focus))
        result = FocusStyleCheck().run(snapshot, options)
        assert result.findings == ()
        assert result.data['focus_styles'][0]['changedProperties'] == ['background-color']

    def test_elements_without_focus_capture_are_not_judged(self, options):
        result = FocusStyleCheck().run(page(button()), options)
        assert result.findings == ()
        assert result.data['focus_styles'] == []


class TestTouchTargetCheck:

    def test_sizes(self, options):
        snapshot = page(
            button(box=(0, 0, 20, 20)),
            button(box=(100, 0, 30, 30)),
            button(box=(200, 0, 50, 50)),
        )
        result = TouchTargetCheck().run(snapshot, options)
        assert types(result) == ['touch_target_too_small', 'touch_target_below_enhanced']
        assert result.findings[0].severity == Severity.MEDIUM
        assert result.findings[0].context.required_size == 24
        assert result.findings[1].severity == Severity.LOW
        assert len(result.data['targets']) == 3

    def test_crowded_targets(self, options):
        snapshot = page(button(box=(0, 0, 50, 50)), button(box=(53, 0, 50, 50)))
        result = TouchTargetCheck().run(snapshot, options)
        assert types(result) == ['touch_target_spacing']
        finding = result.findings[0]
        assert finding.context.distance == 3.0
        assert finding.context.other_selector == snapshot.selector(snapshot.node(3))

    def test_nested_targets_are_not_crowded(self, options):
        snapshot = page(link(box=(0, 0, 100, 100)), button(parent=0, box=(10, 10, 50, 50)))
        assert TouchTargetCheck().run(snapshot, options).findings == ()

    def test_targets_without_geometry_are_skipped(self, options):
        result = TouchTargetCheck().run(page(button(), link()), options)
        assert result.findings == ()
        assert result.data['targets'] == []


class TestFocusOrderCheck:

    def test_page_without_focusable_elements(self, options):
        result = FocusOrderCheck().run(page(node('p', text='Static')), options)
        assert types(result) == ['no_focusable_elements']
        assert result.findings[0].severity == Severity.CRITICAL

    def test_tab_sequence_order(self):
        snapshot = page(
            link(text='Natural'),
            button(text='Second', attrs={'tabindex': '2'}),
            button(text='Skipped', attrs={'tabindex': '-1'}),
            button(text='First', attrs={'tabindex': '1'}),
        )
        assert [n.text for n in tab_sequence(snapshot)] == ['First', 'Second', 'Natural']

    def test_positive_tabindex(self, options):
        snapshot = page(link(), button(attrs={'tabindex': '3'}))
        result = FocusOrderCheck().run(snapshot, options)
        assert types(result) == ['positive_tabindex']
        assert result.findings[0].context.tab_index == 3
        assert result.findings[0].context.position == 1

    def test_backward_jump(self, options):
        snapshot = page(link(box=(0, 500, 80, 30)), link(box=(0, 100, 80, 30)))
        result = FocusOrderCheck().run(snapshot, options)
        assert types(result) == ['illogical_focus_order']
        assert result.findings[0].context.delta_y == -400

    def test_sideways_jump_on_same_row(self, options):
        snapshot = page(link(box=(0, 0, 80, 30)), link(box=(600, 10, 80, 30)))
        assert types(FocusOrderCheck().run(snapshot, options)) == ['illogical_focus_order']

    def test_reading_order_is_fine(self, options):
        snapshot = page(
            link(box=(0, 0, 80, 30)),
            link(box=(100, 0, 80, 30)),
            link(box=(0, 50, 80, 30)),
        )
        result = FocusOrderCheck().run(snapshot, options)
        assert result.findings == ()
        assert [s['position'] for s in result.data['sequence']] == [1, 2, 3]
