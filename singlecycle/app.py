from flask import Flask, request, jsonify
from flask_cors import CORS

from .Simulator import Simulator


def simulator_state(sim):
    words = sim.config['memory']['display_words']
    return {
        'pc': sim.current_pc(),
        'state': sim.state.value,
        'halted': sim.is_halted(),
        'registers': sim.inspect_registers(),
        'memory': {str(addr): value for addr, value in sim.inspect_memory(0, words * 4).items()},
        'instructions': [{'address': inst.address, 'text': inst.text} for inst in sim.instructions],
        'labels': sim.labels,
    }


def outcome_json(outcome):
    if outcome is None:
        return None
    return {'kind': outcome.kind.value, 'index': outcome.index, 'message': outcome.message}


def create_app(simulator=None):
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    sim = simulator if simulator is not None else Simulator()
    app.config['SIMULATOR'] = sim

    @app.route('/load', methods=['POST'])
    def load_program():
        data = request.get_json(silent=True) or {}
        program = data.get('program')
        if not isinstance(program, str):
            return jsonify({'error': "missing 'program'"}), 400

        result = sim.load(program)
        if not result.ok:
            error = result.error
            return jsonify({
                'error': str(error),
                'line': error.line_number,
                'mnemonic': error.mnemonic,
            }), 400

        return jsonify({'instructionCount': result.instruction_count, **simulator_state(sim)})

    @app.route('/step', methods=['POST'])
    def step():
        outcome = sim.step()
        return jsonify({'outcome': outcome_json(outcome), **simulator_state(sim)})

    @app.route('/run', methods=['POST'])
    def run_program():
        data = request.get_json(silent=True) or {}
        try:
            max_steps = int(data.get('max_steps', sim.config['run']['max_steps']))
        except (TypeError, ValueError):
            return jsonify({'error': "'max_steps' must be an integer"}), 400
        # pacing is the client's business; run at full speed here
        result = sim.run(delay=0, max_steps=max_steps)
        return jsonify({
            'steps': result.steps,
            'outcome': outcome_json(result.outcome),
            **simulator_state(sim),
        })

    @app.route('/reset', methods=['POST'])
    def reset():
        sim.reset()
        return jsonify(simulator_state(sim))

    @app.route('/state', methods=['GET'])
    def state():
        return jsonify(simulator_state(sim))

    return app
